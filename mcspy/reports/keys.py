"""
mcspy/reports/keys.py - Key listing (parsed or raw)
"""

from __future__ import annotations

from collections.abc import Sequence

from mcspy.core.scan import KeyDumpCollector
from mcspy.core.types import ParsedKeyRecord, RawKeyRecord

from .sections import Section, print_sections, table_section

RAW_HEADERS = ("Slab", "--", "Item", "Size/Age")
PARSED_HEADERS = ("Slab", "Prefix", "Bin", "Id")


def raw_row(record: RawKeyRecord) -> tuple[str, str, str, str]:
    return (
        f"SLAB={record.slab}",
        "ITEM",
        record.key,
        f"[{record.size_bytes} b; {record.age_seconds} s]",
    )


def parsed_row(record: ParsedKeyRecord) -> tuple[str, str, str, str]:
    return (str(record.slab), record.prefix, record.bin, record.item)


def build_keys_listing(
    parsed: Sequence[ParsedKeyRecord] = (),
    raw: Sequence[RawKeyRecord] | None = None,
) -> Section:
    """Key table; the raw listing wins when ``raw`` is given"""
    if raw is not None:
        return table_section(None, RAW_HEADERS, [raw_row(r) for r in raw])
    return table_section(None, PARSED_HEADERS, [parsed_row(r) for r in parsed])


def run_keys_listing(collector: KeyDumpCollector, raw: bool = False) -> Section:
    collector.refresh_if_needed()
    if raw:
        section = build_keys_listing(raw=collector.raw_records())
    else:
        section = build_keys_listing(parsed=collector.parsed_records())
    print_sections([section])
    return section
