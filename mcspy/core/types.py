"""
mcspy/core/types.py - Record types of the scan/classify pipeline

RawKeyRecord    one ITEM line observed by a cachedump scan
ParsedKeyRecord a key split into (prefix, bin, item) by the taxonomy parser
SlabStat        one allow-listed ``stats slabs`` metric
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import ServerAddress


@dataclass(frozen=True)
class RawKeyRecord:
    """A key observed during a scan

    ``server`` is None for records loaded from a dump written without
    server markers.
    """

    server: ServerAddress | None
    slab: int
    key: str
    size_bytes: int = 0
    age_seconds: int = 0

    def to_dump_line(self) -> str:
        """Raw dump line: ``SLAB=<n> ITEM <key> [<bytes> b; <age> s]``"""
        return f"SLAB={self.slab} ITEM {self.key} [{self.size_bytes} b; {self.age_seconds} s]"

    def sort_key(self) -> tuple[str, int, int, str]:
        """(server, slab, key) ordering used before persisting"""
        if self.server is None:
            return ("", 0, self.slab, self.key)
        return (self.server.host, self.server.port, self.slab, self.key)


@dataclass(frozen=True)
class ParsedKeyRecord:
    """A classified key"""

    slab: int
    prefix: str
    bin: str
    item: str

    def to_line(self) -> str:
        """Parsed dump line: ``<slab>\\t<prefix>\\t<bin>\\t<item>``"""
        return f"{self.slab}\t{self.prefix}\t{self.bin}\t{self.item}"


@dataclass(frozen=True)
class SlabStat:
    """One ``STAT <slab>:<metric> <value>`` line"""

    server: ServerAddress
    slab: int
    metric: str
    value: int | float
