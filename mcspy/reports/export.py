"""
mcspy/reports/export.py - Item value export (dump-files)

Every key of the raw dump (key grep applied) is fetched with ``get`` from
the server that reported it and written to
``<dump-folder>/content-dump/<url-encoded key>``. Keys loaded from a dump
without server markers are tried on every configured server.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote_plus

from mcspy.cli.ui import print_note, print_text
from mcspy.core.config import McSpyConfig, ServerAddress
from mcspy.core.exceptions import StorageError
from mcspy.core.protocol import ProtocolClient
from mcspy.core.scan import KeyDumpCollector, ensure_dump_folder
from mcspy.core.types import RawKeyRecord

logger = logging.getLogger(__name__)


def content_file_name(key: str) -> str:
    """File name for a key (url-encoded, so ``/`` never creates directories)"""
    return quote_plus(key, safe="")


def fetch_value(
    client: ProtocolClient,
    record: RawKeyRecord,
    servers: Sequence[ServerAddress],
) -> bytes | None:
    """Value of a record's key, from its own server when known"""
    candidates = [record.server] if record.server is not None else list(servers)
    for server in candidates:
        value = client.get(server, record.key)
        if value is not None:
            return value
    return None


def write_content(folder: Path, key: str, value: bytes) -> Path:
    path = folder / content_file_name(key)
    try:
        path.write_bytes(value)
    except OSError as e:
        raise StorageError(path=str(path), operation="write", cause=e) from e
    return path


def export_values(
    config: McSpyConfig,
    records: Sequence[RawKeyRecord],
    client: ProtocolClient | None = None,
) -> int:
    """Write the value of every record that is still stored

    Returns:
        Number of files written

    Raises:
        StorageError: Content folder or a value file cannot be written
    """
    client = client or ProtocolClient(timeout=config.connect_timeout)
    folder = ensure_dump_folder(config.content_dump_folder)

    count = 0
    for record in records:
        value = fetch_value(client, record, config.servers)
        if value is None:
            logger.debug(f"{record.key}: not stored anymore")
            continue
        write_content(folder, record.key, value)
        count += 1
    return count


def run_export(
    config: McSpyConfig,
    collector: KeyDumpCollector,
    client: ProtocolClient | None = None,
) -> int:
    collector.refresh_if_needed()
    print_note("Dumping content to files...")
    count = export_values(config, collector.raw_records(), client)
    print_text(f"{count} items written to {config.content_dump_folder}\n")
    return count
