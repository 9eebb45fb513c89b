"""
mcspy/core/scan - slab scanning and key dump snapshots

Example:
    from mcspy.core.scan import KeyDumpCollector

    collector = KeyDumpCollector(config)
    collector.refresh_if_needed()
    records = collector.parsed_records()
"""

from .collector import KeyDumpCollector
from .scanner import SlabScanner, cachedump_command, parse_cachedump
from .snapshot import (
    ensure_dump_folder,
    read_parsed_snapshot,
    read_raw_snapshot,
    snapshot_exists,
    snapshot_is_stale,
    write_parsed_snapshot,
    write_raw_snapshot,
)

__all__ = [
    "KeyDumpCollector",
    "SlabScanner",
    "cachedump_command",
    "ensure_dump_folder",
    "parse_cachedump",
    "read_parsed_snapshot",
    "read_raw_snapshot",
    "snapshot_exists",
    "snapshot_is_stale",
    "write_parsed_snapshot",
    "write_raw_snapshot",
]
