"""Tabular clipboard serialization (tab-separated columns, newline rows)."""

from __future__ import annotations

from sheetgrid.store import CellStore


def serialize_range(store: CellStore, bounds: tuple[int, int, int, int] | None) -> str:
    """Serialize the rectangle ``(min_row, max_row, min_col, max_col)``.

    Cells outside the stored data serialize as empty strings.  Returns
    ``""`` when *bounds* is None.
    """
    if bounds is None:
        return ""
    r0, r1, c0, c1 = bounds
    return "\n".join(
        "\t".join(store.get(r, c).text for c in range(c0, c1 + 1))
        for r in range(r0, r1 + 1)
    )
