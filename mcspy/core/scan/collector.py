"""
mcspy/core/scan/collector.py - Key dump collector with snapshot caching

Owns the raw and parsed snapshots of one dump folder:

- refresh mode (default): scan all servers, write the raw dump, derive and
  write the parsed dump
- cached mode: reuse the existing raw dump as-is when it is non-empty; the
  parsed dump is regenerated when it is missing or older than the raw dump

The parsed dump is never key filtered; the key grep is applied on read.

Example:
    collector = KeyDumpCollector(config, notify=print_note)
    collector.refresh_if_needed()

    parsed = collector.parsed_records()
    raw = collector.raw_records()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from mcspy.core.config import McSpyConfig
from mcspy.core.taxonomy import matches_key_filter, parse_records
from mcspy.core.types import ParsedKeyRecord, RawKeyRecord

from .scanner import SlabScanner
from .snapshot import (
    ensure_dump_folder,
    read_parsed_snapshot,
    read_raw_snapshot,
    remove_snapshots,
    snapshot_exists,
    snapshot_is_stale,
    write_parsed_snapshot,
    write_raw_snapshot,
)

if TYPE_CHECKING:
    from mcspy.cli.ui.progress import ScanTracker

logger = logging.getLogger(__name__)


class KeyDumpCollector:
    """Scan-or-reuse access to the key dump snapshots

    Attributes:
        config: Runtime configuration
        scanner: Slab scanner used on refresh
    """

    def __init__(
        self,
        config: McSpyConfig,
        scanner: SlabScanner | None = None,
        notify: Callable[[str], None] | None = None,
        progress_tracker: ScanTracker | None = None,
    ):
        self.config = config
        self.scanner = scanner or SlabScanner(config)
        self._notify = notify or logger.info
        self._progress_tracker = progress_tracker
        self._scanned_this_run = False
        self._refreshed = False

    @property
    def scanned(self) -> bool:
        """Whether refresh_if_needed() ran a scan"""
        return self._scanned_this_run

    def refresh_if_needed(self) -> bool:
        """Scan unless cached mode is on and a raw dump exists

        Runs at most once per collector; later calls return the first result.

        Returns:
            True if a scan was run

        Raises:
            StorageError: Dump folder or snapshot cannot be written
        """
        if self._refreshed:
            return self._scanned_this_run
        self._refreshed = True

        ensure_dump_folder(self.config.dump_folder)
        raw_path = self.config.raw_dump_path

        if not self.config.refresh and snapshot_exists(raw_path):
            self._notify(f"Using existing key dump {raw_path}")
            if snapshot_is_stale(self.config.parsed_dump_path, raw_path):
                self._write_parsed(read_raw_snapshot(raw_path))
            return False

        self._notify(f"Dumping list of all memcache keys to file {raw_path}")
        records = self.scanner.scan(progress_tracker=self._progress_tracker)
        write_raw_snapshot(raw_path, records)
        self._notify(f"  Done. {len(records)} key(s) from {len(self.config.servers)} server(s).")

        if self.scanner.errors.has_errors:
            self._notify(self.scanner.errors.get_summary())

        self._write_parsed(records)
        self._scanned_this_run = True
        return True

    def _write_parsed(self, records: list[RawKeyRecord]) -> None:
        path = self.config.parsed_dump_path
        count = write_parsed_snapshot(path, parse_records(records))
        self._notify(f"Parsed file is: {path} ({count} classified key(s))")

    def raw_records(self) -> list[RawKeyRecord]:
        """Raw records, filtered by the key grep"""
        records = read_raw_snapshot(self.config.raw_dump_path)
        return [r for r in records if matches_key_filter(r.key, self.config.key_grep)]

    def parsed_records(self) -> list[ParsedKeyRecord]:
        """Parsed records, filtered by the key grep

        The parsed dump holds every classified key of the raw dump. A key
        grep matches raw keys, so filtered records are derived from the raw
        dump instead.
        """
        if not self.config.key_grep:
            return read_parsed_snapshot(self.config.parsed_dump_path)
        return list(parse_records(read_raw_snapshot(self.config.raw_dump_path), self.config.key_grep))

    def cleanup(self) -> None:
        """Delete both snapshot files"""
        removed = remove_snapshots(self.config.raw_dump_path, self.config.parsed_dump_path)
        if removed:
            self._notify("Cleaning up temporary files")
