"""
mcspy/core/render.py - Plain text table renderer

    +-------+-------+
    | Count | Bin   |
    +-------+-------+
    | 12    | cache |
    +-------+-------+

Column widths use terminal cell width (East Asian wide characters count
as two), so output stays aligned for non-ASCII keys.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from rich.cells import cell_len


def _pad(text: str, width: int) -> str:
    return text + " " * (width - cell_len(text))


def render_table(rows: Iterable[Sequence[Any]], headers: Sequence[str] = ()) -> str:
    """Render rows as a bordered text table

    Args:
        rows: Row cells (any value, rendered with str())
        headers: Column headers (optional)

    Returns:
        Table text ending with a newline, or "" when there are no rows
    """
    cells = [[str(cell) for cell in row] for row in rows]
    if not cells:
        return ""

    ncols = max([len(headers)] + [len(row) for row in cells])
    widths = [0] * ncols
    for i, header in enumerate(headers):
        widths[i] = cell_len(header)
    for row in cells:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], cell_len(cell))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(values: Sequence[str]) -> str:
        padded = list(values) + [""] * (ncols - len(values))
        return "|" + "|".join(f" {_pad(v, w)} " for v, w in zip(padded, widths)) + "|"

    out = []
    if headers:
        out.append(border)
        out.append(line(list(headers)))
    out.append(border)
    out.extend(line(row) for row in cells)
    out.append(border)
    return "\n".join(out) + "\n"
