"""
mcspy/reports/usage.py - Key usage report

Sections:
    1. Count by prefix, count by bin (top 10)
    2. Crosstabs Prefix/Bin and Prefix/Slab
    3. For every prefix with at least 5 keys (most used first):
       crosstab Cache_Bins/Slab and the top 20 key patterns
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from mcspy.core.aggregation import (
    SIGNIFICANT_PREFIX_MIN,
    crosstab,
    frequency,
    significant_prefixes,
    top_patterns,
)
from mcspy.core.config import McSpyConfig
from mcspy.core.scan import KeyDumpCollector
from mcspy.core.types import ParsedKeyRecord

from .sections import Section, crosstab_section, print_sections, table_section

logger = logging.getLogger(__name__)


def frequency_section(title: str, records: Sequence[ParsedKeyRecord], field_name: str) -> Section:
    rows = frequency(records, field_name)
    return table_section(title, ["Count", field_name.capitalize()], rows)


def prefix_sections(records: Sequence[ParsedKeyRecord], prefix: str) -> list[Section]:
    """Deep analysis of one prefix"""
    subset = [r for r in records if r.prefix == prefix]
    return [
        Section(title=f"Analysing prefix = {prefix}"),
        crosstab_section(crosstab(subset, row_field="slab", col_field="bin"), "Cache_Bins", "Slab"),
        table_section(None, ["Count", "Pattern"], top_patterns(subset), text="Top patterns observed:\n"),
    ]


def build_usage_report(
    records: Sequence[ParsedKeyRecord],
    minimum: int = SIGNIFICANT_PREFIX_MIN,
) -> list[Section]:
    """Build every section of the usage report

    Args:
        records: Parsed key records
        minimum: Minimum keys for a prefix to get its own analysis

    Returns:
        Sections in output order
    """
    sections = [
        frequency_section("Count by memcache_key_prefix", records, "prefix"),
        frequency_section("Count by Bin", records, "bin"),
        crosstab_section(crosstab(records, row_field="bin", col_field="prefix"), "Prefix", "Bin"),
        crosstab_section(crosstab(records, row_field="slab", col_field="prefix"), "Prefix", "Slab"),
    ]

    for prefix in significant_prefixes(records, minimum):
        sections.extend(prefix_sections(records, prefix))

    return sections


def run_usage_report(config: McSpyConfig, collector: KeyDumpCollector, cleanup: bool = False) -> list[Section]:
    """Refresh the dump if needed and print the usage report

    Returns:
        Printed sections
    """
    collector.refresh_if_needed()
    records = collector.parsed_records()
    logger.info(f"Usage report over {len(records)} classified key(s)")

    sections = build_usage_report(records)
    print_sections(sections)

    if cleanup:
        collector.cleanup()
    return sections
