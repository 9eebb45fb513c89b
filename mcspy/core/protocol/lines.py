"""
mcspy/core/protocol/lines.py - Response line classifier

Every response line is classified against a small closed set of shapes.
Lines that match none of them are UNKNOWN and get discarded by callers.
"""

import re
from dataclasses import dataclass
from enum import Enum
from re import Pattern


class LineKind(Enum):
    """Response line shapes"""

    ITEM = "item"  # ITEM <key> [<bytes> b; <age> s]
    STAT = "stat"  # STAT <name> <value>
    VALUE = "value"  # VALUE <key> <flags> <bytes>
    TERMINATOR = "terminator"  # END, DELETED, NOT_FOUND, OK
    UNKNOWN = "unknown"


TERMINATORS = frozenset({"END", "DELETED", "NOT_FOUND", "OK"})

_ITEM_PATTERN: Pattern[str] = re.compile(r"^ITEM (\S+)(?: \[(\d+) b; (\d+) s\])?")
_STAT_PATTERN: Pattern[str] = re.compile(r"^STAT (\S+)\s+(\S+)")
_VALUE_PATTERN: Pattern[str] = re.compile(r"^VALUE (\S+) (\d+) (\d+)")
_SLAB_STAT_PATTERN: Pattern[str] = re.compile(r"^(\d+):(\w+)$")


@dataclass(frozen=True)
class ResponseLine:
    """A classified response line

    Attributes:
        kind: Line shape
        text: Line without the trailing CRLF
        fields: Extracted fields (shape dependent)
    """

    kind: LineKind
    text: str
    fields: tuple[str, ...] = ()


def is_terminator(line: str) -> bool:
    """Whether the (stripped) line ends a response"""
    return line.strip() in TERMINATORS


def classify_line(line: str) -> ResponseLine:
    """Classify one response line

    Field layout per kind:
        ITEM: (key, bytes, age) - bytes/age are "0" when the bracket is missing
        STAT: (name, value)
        VALUE: (key, flags, bytes)
        TERMINATOR / UNKNOWN: ()
    """
    text = line.rstrip("\r\n")

    if is_terminator(text):
        return ResponseLine(LineKind.TERMINATOR, text)

    match = _ITEM_PATTERN.match(text)
    if match:
        key, size, age = match.groups()
        return ResponseLine(LineKind.ITEM, text, (key, size or "0", age or "0"))

    match = _STAT_PATTERN.match(text)
    if match:
        return ResponseLine(LineKind.STAT, text, match.groups())

    match = _VALUE_PATTERN.match(text)
    if match:
        return ResponseLine(LineKind.VALUE, text, match.groups())

    return ResponseLine(LineKind.UNKNOWN, text)


def split_slab_stat(name: str) -> tuple[int, str] | None:
    """Split a ``stats slabs`` stat name ``<slab>:<metric>``

    Returns:
        (slab, metric), or None for global stats like ``active_slabs``
    """
    match = _SLAB_STAT_PATTERN.match(name)
    if not match:
        return None
    return int(match.group(1)), match.group(2)
