"""
mcspy/reports/sections.py - Report section model and printing

Report builders return a list of Section values (pure data); print_sections
sends them to the console. Keeps the builders testable without a terminal.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from mcspy.cli.ui import print_header, print_text
from mcspy.core.aggregation import CrosstabMatrix
from mcspy.core.render import render_table


@dataclass(frozen=True)
class Section:
    """One block of report output

    Attributes:
        title: Section header (None = no header)
        headers: Table column headers
        rows: Table rows (empty = no table)
        text: Free text printed before the table
    """

    title: str | None = None
    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = field(default_factory=tuple)
    text: str | None = None

    def render(self) -> str:
        """Table and text without the header"""
        out = self.text or ""
        if self.rows:
            out += render_table(self.rows, self.headers)
        return out


def table_section(
    title: str | None,
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    text: str | None = None,
) -> Section:
    return Section(
        title=title,
        headers=tuple(headers),
        rows=tuple(tuple(str(cell) for cell in row) for row in rows),
        text=text,
    )


def crosstab_section(matrix: CrosstabMatrix, col_label: str, row_label: str) -> Section:
    """``Crosstab: <col_label> / <row_label>`` section"""
    headers, rows = matrix.to_table(row_label)
    return table_section(f"Crosstab: {col_label} / {row_label}", headers, rows)


def print_sections(sections: Iterable[Section]) -> None:
    """Print sections to stdout"""
    for section in sections:
        if section.title:
            print_header(section.title)
        body = section.render()
        if body:
            print_text(body)
