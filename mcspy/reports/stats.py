"""
mcspy/reports/stats.py - Runtime and slab statistics report

Runtime Statistics: raw ``stats`` output of every server.
Slab Statistics:    ``stats slabs`` of every server as a Slab x Metric
                    crosstab, restricted to SLAB_METRICS.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mcspy.core.aggregation import crosstab, to_number
from mcspy.core.config import McSpyConfig, ServerAddress
from mcspy.core.protocol import LineKind, ProtocolClient, ResponseLine, split_slab_stat
from mcspy.core.types import SlabStat

from .sections import Section, crosstab_section, print_sections

logger = logging.getLogger(__name__)

SLAB_METRICS = frozenset(
    {
        "chunk_size",
        "chunks_per_page",
        "cmd_set",
        "delete_hits",
        "get_hits",
        "used_chunks",
        "total_chunks",
    }
)


def parse_slab_stats(server: ServerAddress, lines: Iterable[ResponseLine]) -> list[SlabStat]:
    """Keep ``STAT <slab>:<metric> <value>`` lines whose metric is allow-listed

    Global lines of ``stats slabs`` (``active_slabs``, ``total_malloced``)
    carry no slab id and are dropped.
    """
    stats: list[SlabStat] = []
    for line in lines:
        if line.kind is not LineKind.STAT:
            continue
        name, value = line.fields
        split = split_slab_stat(name)
        if split is None:
            continue
        slab, metric = split
        if metric in SLAB_METRICS:
            stats.append(SlabStat(server=server, slab=slab, metric=metric, value=to_number(value)))
    return stats


def runtime_section(client: ProtocolClient, server: ServerAddress) -> Section:
    raw = client.send(server, "stats")
    if raw is None:
        logger.warning(f"{server}: unreachable, no runtime statistics")
        text = ""
    else:
        text = raw.decode("utf-8", errors="replace")
    return Section(text=f"-- Server {server}\n{text}\n")


def slab_section(client: ProtocolClient, server: ServerAddress) -> Section:
    lines = client.request(server, "stats slabs") or []
    stats = parse_slab_stats(server, lines)
    return crosstab_section(crosstab(stats, row_field="slab", col_field="metric", value_field="value"), "Metric", "Slab")


def build_stats_report(config: McSpyConfig, client: ProtocolClient) -> list[Section]:
    """Build the statistics report for every configured server"""
    sections = [Section(title="Runtime Statistics")]
    sections.extend(runtime_section(client, server) for server in config.servers)

    sections.append(Section(title="Slab Statistics"))
    sections.extend(slab_section(client, server) for server in config.servers)
    return sections


def run_stats_report(config: McSpyConfig, client: ProtocolClient | None = None) -> list[Section]:
    client = client or ProtocolClient(timeout=config.connect_timeout)
    sections = build_stats_report(config, client)
    print_sections(sections)
    return sections
