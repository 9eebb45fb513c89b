"""
mcspy/core/aggregation.py - Frequency tables, crosstabs and key patterns

Pure functions over record sequences. Records are accessed by attribute
name, so any of the record types (ParsedKeyRecord, SlabStat) can be
aggregated.

Example:
    top_prefixes = frequency(records, "prefix")            # [(count, prefix), ...]

    matrix = crosstab(records, row_field="bin", col_field="prefix")
    headers, rows = matrix.to_table("Bin")

    for prefix in significant_prefixes(records):
        subset = [r for r in records if r.prefix == prefix]
        patterns = top_patterns(subset)                     # [(count, "bin => pattern"), ...]
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from re import Pattern
from typing import Any
from urllib.parse import unquote_plus

FREQUENCY_LIMIT = 10
PATTERN_LIMIT = 20

# Prefixes with fewer records are left out of the per-prefix analysis
SIGNIFICANT_PREFIX_MIN = 5

TOTAL_LABEL = "TOTAL"
EMPTY_CELL = "-"

Number = int | float

# Applied in this order; placeholders contain no run the later rules match
_ELISION_RULES: tuple[tuple[Pattern[str], str], ...] = (
    (re.compile(r"\.html_[a-zA-Z0-9_-]{6,100}"), ".html_{hash}"),
    (re.compile(r"\.html\.twig_[a-zA-Z0-9_-]{6,100}"), ".html.twig_{hash}"),
    (re.compile(r"[0-9a-f]{6,100}"), "{hex-hash}"),
    (re.compile(r":\d+"), ":{num}"),
)


# =============================================================================
# Frequency
# =============================================================================


def frequency(
    records: Iterable[Any],
    field_name: str,
    limit: int = FREQUENCY_LIMIT,
) -> list[tuple[int, Hashable]]:
    """Count records per field value

    Args:
        records: Records to count
        field_name: Attribute to group by
        limit: Number of rows to return

    Returns:
        (count, value) pairs, descending by count; ties keep first-seen order
    """
    counts = Counter(getattr(record, field_name) for record in records)
    return [(count, value) for value, count in counts.most_common(limit)]


# =============================================================================
# Crosstab
# =============================================================================


def _sort_key(value: Hashable) -> tuple[int, Any]:
    """Numbers ascending first, then everything else lexicographically"""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class CrosstabMatrix:
    """Row -> column -> accumulator matrix with totals

    Built with add() in one pass, then frozen with freeze(); after that
    add() raises RuntimeError. Row and column keys are kept sorted.

    Attributes:
        cells: Accumulated values per (row, column)
        row_keys: Sorted row keys
        col_keys: Sorted column keys
    """

    cells: dict[Hashable, dict[Hashable, Number]] = field(default_factory=dict)
    row_keys: list[Hashable] = field(default_factory=list)
    col_keys: list[Hashable] = field(default_factory=list)
    _frozen: bool = field(default=False, repr=False)

    def add(self, row: Hashable, col: Hashable, value: Number = 1) -> None:
        """Accumulate ``value`` into cell (row, col)"""
        if self._frozen:
            raise RuntimeError("CrosstabMatrix is frozen")
        row_cells = self.cells.setdefault(row, {})
        row_cells[col] = row_cells.get(col, 0) + value
        if row not in self.row_keys:
            self.row_keys.append(row)
        if col not in self.col_keys:
            self.col_keys.append(col)

    def freeze(self) -> CrosstabMatrix:
        """Sort the keys and stop accepting values"""
        self.row_keys.sort(key=_sort_key)
        self.col_keys.sort(key=_sort_key)
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, row: Hashable, col: Hashable) -> Number | None:
        """Cell value, None when no record fell into the cell"""
        return self.cells.get(row, {}).get(col)

    def row_total(self, row: Hashable) -> Number:
        return sum(self.cells.get(row, {}).values())

    def col_total(self, col: Hashable) -> Number:
        return sum(row_cells.get(col, 0) for row_cells in self.cells.values())

    @property
    def row_totals(self) -> dict[Hashable, Number]:
        return {row: self.row_total(row) for row in self.row_keys}

    @property
    def col_totals(self) -> dict[Hashable, Number]:
        return {col: self.col_total(col) for col in self.col_keys}

    @property
    def grand_total(self) -> Number:
        return sum(self.row_totals.values())

    def to_table(self, row_label: str) -> tuple[list[str], list[list[str]]]:
        """Render as (headers, rows)

        Headers are ``[row_label, TOTAL, *columns]``. The first row holds the
        column totals with the grand total in the TOTAL column; every other
        row holds a row key, its total and its cells. Empty cells render as
        ``-``.
        """
        headers = [row_label, TOTAL_LABEL] + [str(col) for col in self.col_keys]

        col_totals = self.col_totals
        rows = [[TOTAL_LABEL, _format_number(self.grand_total)] + [_format_number(col_totals[c]) for c in self.col_keys]]

        for row in self.row_keys:
            cells = []
            for col in self.col_keys:
                value = self.get(row, col)
                cells.append(EMPTY_CELL if value is None else _format_number(value))
            rows.append([str(row), _format_number(self.row_total(row))] + cells)

        return headers, rows


def to_number(value: Any) -> Number:
    """Convert a stat value to a number (0 when not numeric)"""
    if isinstance(value, (int, float)):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def crosstab(
    records: Iterable[Any],
    row_field: str,
    col_field: str,
    value_field: str | None = None,
) -> CrosstabMatrix:
    """Build a frozen CrosstabMatrix

    Args:
        records: Records to aggregate
        row_field: Attribute used as row key
        col_field: Attribute used as column key
        value_field: Attribute summed into cells (None = count records)

    Returns:
        Frozen CrosstabMatrix
    """
    matrix = CrosstabMatrix()
    for record in records:
        value = to_number(getattr(record, value_field)) if value_field else 1
        matrix.add(getattr(record, row_field), getattr(record, col_field), value)
    return matrix.freeze()


# =============================================================================
# Pattern clustering
# =============================================================================


def elide_variable_parts(text: str) -> str:
    """Replace hashes, hex runs and numeric ids with placeholders

    Idempotent: placeholders are not matched again.
    """
    for pattern, placeholder in _ELISION_RULES:
        text = pattern.sub(placeholder, text)
    return text


def item_pattern(item: str) -> str:
    """URL-decode an item id and elide its variable parts"""
    return elide_variable_parts(unquote_plus(item))


def top_patterns(records: Iterable[Any], limit: int = PATTERN_LIMIT) -> list[tuple[int, str]]:
    """Most frequent ``bin => pattern`` templates

    Returns:
        (count, pattern) pairs, descending by count; ties keep first-seen order
    """
    counts = Counter(f"{record.bin} => {item_pattern(record.item)}" for record in records)
    return [(count, pattern) for pattern, count in counts.most_common(limit)]


def significant_prefixes(
    records: Sequence[Any],
    minimum: int = SIGNIFICANT_PREFIX_MIN,
) -> list[str]:
    """Prefixes with at least ``minimum`` records, descending by count"""
    counts = Counter(record.prefix for record in records)
    return [prefix for prefix, count in counts.most_common() if count >= minimum]
