"""
mcspy/core/protocol - memcache text protocol

Example:
    from mcspy.core.protocol import LineKind, ProtocolClient

    for line in ProtocolClient().request(server, "stats slabs") or []:
        if line.kind is LineKind.STAT:
            name, value = line.fields
"""

from .client import ProtocolClient
from .lines import LineKind, ResponseLine, classify_line, is_terminator, split_slab_stat

__all__ = [
    "LineKind",
    "ProtocolClient",
    "ResponseLine",
    "classify_line",
    "is_terminator",
    "split_slab_stat",
]
