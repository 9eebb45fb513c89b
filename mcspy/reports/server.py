"""
mcspy/reports/server.py - Single item lookup and server settings
"""

from __future__ import annotations

import logging

from mcspy.cli.ui import print_header, print_note, print_text
from mcspy.core.config import McSpyConfig, ServerAddress
from mcspy.core.protocol import ProtocolClient

logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Not found on this server."
UNREACHABLE_TEXT = "Server unreachable."


def get_item(
    config: McSpyConfig,
    key: str,
    client: ProtocolClient | None = None,
) -> dict[ServerAddress, bytes | None]:
    """Fetch one key from every configured server

    Returns:
        {server: value or None}, in server order

    Raises:
        ValidationError: Invalid key
    """
    client = client or ProtocolClient(timeout=config.connect_timeout)
    results: dict[ServerAddress, bytes | None] = {}
    for server in config.servers:
        print_note(f"-- Item from server {server} --")
        value = client.get(server, key)
        results[server] = value
        if value is None:
            print_text(NOT_FOUND_TEXT + "\n")
        else:
            print_text(value.decode("utf-8", errors="replace") + "\n")
    return results


def show_server_config(config: McSpyConfig, client: ProtocolClient | None = None) -> dict[ServerAddress, str]:
    """Print ``stats settings`` of every server"""
    client = client or ProtocolClient(timeout=config.connect_timeout)
    print_header("Memcache server configuration")

    settings: dict[ServerAddress, str] = {}
    for server in config.servers:
        raw = client.send(server, "stats settings")
        if raw is None:
            logger.warning(f"{server}: unreachable, no settings")
            settings[server] = ""
            print_text(f"-- Server {server.host} port {server.port}\n{UNREACHABLE_TEXT}\n")
            continue
        text = raw.decode("utf-8", errors="replace")
        settings[server] = text
        print_text(f"-- Server {server.host} port {server.port}\n{text}\n")
    return settings
