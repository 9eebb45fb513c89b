"""
mcspy/core/config.py - Runtime configuration

The configuration is built once at startup (``load_config``) and passed to
every component. It is frozen; nothing mutates it after construction.

Environment fallbacks:
    MCSPY_SERVERS      Comma separated ``host[:port]`` list
    MCSPY_DUMP_FOLDER  Folder for the key dump snapshots

Usage:
    from mcspy.core.config import load_config

    config = load_config(servers="10.0.0.1:11211,10.0.0.2", slab=5)
    for server in config.servers:
        print(server.host, server.port)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from mcspy import __version__

from .exceptions import ConfigError, ValidationError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 11211

# Slab ids scanned when no single slab is selected
MIN_SLAB = 1
MAX_SLAB = 42

ENV_SERVERS = "MCSPY_SERVERS"
ENV_DUMP_FOLDER = "MCSPY_DUMP_FOLDER"

DEFAULT_DUMP_FOLDER = os.path.join(tempfile.gettempdir(), "mcspy-dump")

# Timeouts in seconds
DEFAULT_CONNECT_TIMEOUT = 2.0
DEFAULT_SCAN_TIMEOUT = 1.0


def get_version() -> str:
    """Return the package version string"""
    return __version__


@dataclass(frozen=True, order=True)
class ServerAddress:
    """A memcache server endpoint"""

    host: str
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, value: str) -> ServerAddress:
        """Parse ``host[:port]``

        Args:
            value: Address string (e.g. "10.0.0.1:11211", "cache01")

        Returns:
            ServerAddress

        Raises:
            ConfigError: Empty host or non-numeric / out of range port
        """
        text = value.strip()
        host, sep, port_text = text.rpartition(":")
        if not sep:
            host, port_text = text, ""

        if not host:
            raise ConfigError("servers", f"missing host in '{value}'")

        if not port_text:
            return cls(host=host)

        try:
            port = int(port_text)
        except ValueError as e:
            raise ConfigError("servers", f"invalid port in '{value}'", cause=e) from e
        if not 0 < port < 65536:
            raise ConfigError("servers", f"port out of range in '{value}'")

        return cls(host=host, port=port)


def parse_servers(value: str | None) -> tuple[ServerAddress, ...]:
    """Parse a comma separated server list

    Empty entries are skipped; duplicates keep their first position.
    """
    if not value:
        return ()

    servers: list[ServerAddress] = []
    for part in value.split(","):
        if not part.strip():
            continue
        server = ServerAddress.parse(part)
        if server not in servers:
            servers.append(server)
    return tuple(servers)


def validate_slab(slab: int | None) -> int | None:
    """Check a single-slab selector

    Args:
        slab: Slab id, or None / 0 for the full range

    Returns:
        The slab id, or None for the full range
    """
    if not slab:
        return None
    if not MIN_SLAB <= slab <= MAX_SLAB:
        raise ValidationError("slab", slab, f"{MIN_SLAB}..{MAX_SLAB}")
    return slab


@dataclass(frozen=True)
class McSpyConfig:
    """Immutable runtime configuration

    Attributes:
        servers: Servers to inspect, in scan order
        dump_folder: Folder holding the raw and parsed key dump snapshots
        slab: Single slab to scan (None = MIN_SLAB..MAX_SLAB)
        key_grep: Substring filter for keys (None = no filter)
        refresh: Rescan even if a snapshot already exists
        connect_timeout: Timeout for diagnostic commands and item fetches
        scan_timeout: Timeout for each cachedump connection
        max_workers: Servers scanned concurrently (1 = sequential)
        quiet: Suppress informational output
        verbose: Enable INFO logging
    """

    servers: tuple[ServerAddress, ...] = field(default_factory=lambda: (ServerAddress(DEFAULT_HOST),))
    dump_folder: Path = field(default_factory=lambda: Path(DEFAULT_DUMP_FOLDER))
    slab: int | None = None
    key_grep: str | None = None
    refresh: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT
    max_workers: int = 1
    quiet: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.servers:
            raise ConfigError("servers", "at least one server is required")
        if self.max_workers < 1:
            raise ConfigError("max_workers", f"must be >= 1, got {self.max_workers}")
        if self.connect_timeout <= 0 or self.scan_timeout <= 0:
            raise ConfigError("timeout", "timeouts must be positive")
        validate_slab(self.slab)

    @property
    def slabs(self) -> tuple[int, ...]:
        """Slab ids to scan"""
        if self.slab:
            return (self.slab,)
        return tuple(range(MIN_SLAB, MAX_SLAB + 1))

    @property
    def raw_dump_path(self) -> Path:
        """Path of the raw key dump snapshot"""
        return self.dump_folder / "memcache-key-dump-raw.txt"

    @property
    def parsed_dump_path(self) -> Path:
        """Path of the parsed key dump snapshot"""
        return self.dump_folder / "memcache-key-dump-parsed.txt"

    @property
    def content_dump_folder(self) -> Path:
        """Folder for exported item values"""
        return self.dump_folder / "content-dump"


def load_config(
    servers: str | None = None,
    dump_folder: str | None = None,
    slab: int | None = None,
    key_grep: str | None = None,
    refresh: bool = True,
    max_workers: int = 1,
    quiet: bool = False,
    verbose: bool = False,
) -> McSpyConfig:
    """Build the configuration from CLI values and environment fallbacks

    Args:
        servers: Comma separated server list (falls back to MCSPY_SERVERS, then localhost)
        dump_folder: Dump folder (falls back to MCSPY_DUMP_FOLDER, then the temp dir)
        slab: Single slab id, None or 0 for all slabs
        key_grep: Key substring filter; "" and "." mean no filter
        refresh: Rescan even if a snapshot exists
        max_workers: Number of servers scanned concurrently
        quiet: Suppress informational output
        verbose: Enable INFO logging

    Returns:
        McSpyConfig
    """
    server_list = parse_servers(servers or os.environ.get(ENV_SERVERS))
    folder = dump_folder or os.environ.get(ENV_DUMP_FOLDER) or DEFAULT_DUMP_FOLDER

    kwargs = {}
    if server_list:
        kwargs["servers"] = server_list

    return McSpyConfig(
        dump_folder=Path(folder),
        slab=validate_slab(slab),
        key_grep=key_grep if key_grep not in (None, "", ".") else None,
        refresh=refresh,
        max_workers=max_workers,
        quiet=quiet,
        verbose=verbose,
        **kwargs,
    )
