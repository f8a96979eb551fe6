"""Numeric summaries over cells: selection statistics and column typing."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from sheetgrid.store import CellStore

ColumnKind = Literal["number", "text"]

# A column is numeric when more than this share of its sampled cells is.
NUMERIC_COLUMN_THRESHOLD = 0.7


class SelectionStats(BaseModel):
    """Sum / count / average of the numeric cells in a rectangle."""

    model_config = ConfigDict(frozen=True)

    sum: float
    count: int
    avg: float


def range_stats(store: CellStore, bounds: tuple[int, int, int, int] | None) -> SelectionStats | None:
    """Summarize numeric cells (numbers or numeric text) inside *bounds*.

    Sum and average are rounded to two decimals.  Returns None when the
    rectangle holds no numeric cell.
    """
    if bounds is None:
        return None
    r0, r1, c0, c1 = bounds
    total = 0.0
    count = 0
    for r in range(r0, r1 + 1):
        for c in range(c0, c1 + 1):
            num = store.get(r, c).as_number()
            if num is not None:
                total += num
                count += 1
    if count == 0:
        return None
    return SelectionStats(sum=round(total, 2), count=count, avg=round(total / count, 2))


def detect_column_kind(store: CellStore, col: int, sample: int = 10, skip_rows: int = 0) -> ColumnKind:
    """Classify column *col* from its first *sample* data rows.

    Args:
        store: The cell store.
        col: 0-based column index.
        sample: Number of rows to inspect.
        skip_rows: Leading rows to ignore (e.g. a header row).

    Returns:
        ``"number"`` when more than 70% of the sampled cells are numeric.
    """
    rows = range(skip_rows, min(store.row_count(), skip_rows + sample))
    if not rows:
        return "text"
    numeric = sum(1 for r in rows if store.get(r, col).as_number() is not None)
    return "number" if numeric > len(rows) * NUMERIC_COLUMN_THRESHOLD else "text"
