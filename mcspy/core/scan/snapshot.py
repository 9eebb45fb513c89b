"""
mcspy/core/scan/snapshot.py - Durable key dump snapshots

Plain text, newline delimited files in the dump folder:

    memcache-key-dump-raw.txt     SLAB=<n> ITEM <key> [<bytes> b; <age> s]
    memcache-key-dump-parsed.txt  <slab>\\t<prefix>\\t<bin>\\t<item>

The raw dump additionally carries ``# SERVER=<host>:<port>`` marker lines
before each server's block so records can be traced back to their server.
Readers ignore every line that does not match a known shape.

Files are written to a temporary file in the same folder and renamed into
place, so a reader never sees a partially written snapshot. Any OSError is
raised as StorageError.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path
from re import Pattern

from mcspy.core.config import ServerAddress
from mcspy.core.exceptions import ConfigError, StorageError
from mcspy.core.types import ParsedKeyRecord, RawKeyRecord

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
SERVER_MARKER = "# SERVER="

_RAW_LINE_PATTERN: Pattern[str] = re.compile(r"^SLAB=(\d+) ITEM (\S+)(?: \[(\d+) b; (\d+) s\])?")


def ensure_dump_folder(folder: Path) -> Path:
    """Create the dump folder if needed

    Raises:
        StorageError: Folder cannot be created
    """
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(path=str(folder), operation="mkdir", cause=e) from e
    return folder


def snapshot_exists(path: Path) -> bool:
    """Whether a non-empty snapshot file exists"""
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def snapshot_is_stale(derived: Path, source: Path) -> bool:
    """Whether ``derived`` is missing or older than ``source``"""
    try:
        return derived.stat().st_mtime < source.stat().st_mtime
    except OSError:
        return True


def write_lines_atomic(path: Path, lines: Iterable[str]) -> int:
    """Write lines to ``path`` via a temp file + rename

    Returns:
        Number of lines written
    """
    ensure_dump_folder(path.parent)
    count = 0
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=ENCODING,
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            for line in lines:
                handle.write(line)
                handle.write("\n")
                count += 1
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StorageError(path=str(path), operation="write", cause=e) from e

    logger.info(f"Wrote {count} line(s) to {path}")
    return count


def _read_lines(path: Path) -> list[str]:
    try:
        with open(path, encoding=ENCODING, errors="replace") as handle:
            return handle.read().splitlines()
    except OSError as e:
        raise StorageError(path=str(path), operation="read", cause=e) from e


# =============================================================================
# Raw dump
# =============================================================================


def _raw_lines(records: Iterable[RawKeyRecord]) -> Iterable[str]:
    current: ServerAddress | None = None
    for record in records:
        if record.server is not None and record.server != current:
            current = record.server
            yield f"{SERVER_MARKER}{current}"
        yield record.to_dump_line()


def write_raw_snapshot(path: Path, records: Iterable[RawKeyRecord]) -> int:
    """Persist raw records (caller provides the final order)

    Returns:
        Number of records written
    """
    records = list(records)
    write_lines_atomic(path, _raw_lines(records))
    return len(records)


def parse_raw_line(line: str, server: ServerAddress | None = None) -> RawKeyRecord | None:
    """Parse one raw dump line (None for markers and malformed lines)"""
    match = _RAW_LINE_PATTERN.match(line)
    if not match:
        return None
    slab, key, size, age = match.groups()
    return RawKeyRecord(
        server=server,
        slab=int(slab),
        key=key,
        size_bytes=int(size or 0),
        age_seconds=int(age or 0),
    )


def read_raw_snapshot(path: Path) -> list[RawKeyRecord]:
    """Load the raw dump"""
    records: list[RawKeyRecord] = []
    server: ServerAddress | None = None

    for line in _read_lines(path):
        if line.startswith(SERVER_MARKER):
            try:
                server = ServerAddress.parse(line[len(SERVER_MARKER) :])
            except ConfigError:
                logger.debug(f"Ignoring bad server marker: {line!r}")
                server = None
            continue

        record = parse_raw_line(line, server)
        if record is not None:
            records.append(record)

    return records


# =============================================================================
# Parsed dump
# =============================================================================


def write_parsed_snapshot(path: Path, records: Iterable[ParsedKeyRecord]) -> int:
    """Persist parsed records

    Returns:
        Number of records written
    """
    return write_lines_atomic(path, (record.to_line() for record in records))


def parse_parsed_line(line: str) -> ParsedKeyRecord | None:
    """Parse one tab separated parsed dump line"""
    cols = line.split("\t")
    if len(cols) != 4 or not cols[0].isdigit():
        return None
    return ParsedKeyRecord(slab=int(cols[0]), prefix=cols[1], bin=cols[2], item=cols[3])


def read_parsed_snapshot(path: Path) -> list[ParsedKeyRecord]:
    """Load the parsed dump"""
    records: list[ParsedKeyRecord] = []
    for line in _read_lines(path):
        record = parse_parsed_line(line)
        if record is not None:
            records.append(record)
    return records


def remove_snapshots(*paths: Path) -> list[Path]:
    """Delete snapshot files that exist

    Returns:
        Deleted paths
    """
    removed: list[Path] = []
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise StorageError(path=str(path), operation="delete", cause=e) from e
        removed.append(path)
    return removed
