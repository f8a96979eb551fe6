"""Structural row/column insertion and deletion.

Every applied mutation re-indexes the dimension overrides and clears the
selection and search results outright; those indices are never
repaired in place.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from sheetgrid.dimensions import Axis, DimensionTable
from sheetgrid.errors import InvalidIndex
from sheetgrid.search import SearchIndex
from sheetgrid.selection import SelectionModel
from sheetgrid.store import CellStore
from sheetgrid.values import EMPTY


class MutationResult(BaseModel):
    """Outcome of a structural mutation.

    A refused mutation (``applied=False``) is a benign no-op that protects
    an invariant, e.g. deleting the last remaining row.
    ``count`` is the number of rows or columns the operation targets.
    """

    model_config = ConfigDict(frozen=True)

    op: Literal["insert", "delete"]
    axis: Axis
    index: int
    applied: bool
    reason: str | None = None
    count: int = 1

    @property
    def refused(self) -> bool:
        return not self.applied


class MutationEngine:
    """Coordinates the store, sizes, selection and search on insert/delete."""

    def __init__(
        self,
        store: CellStore,
        dimensions: DimensionTable,
        selection: SelectionModel,
        search: SearchIndex,
    ) -> None:
        self._store = store
        self._dims = dimensions
        self._selection = selection
        self._search = search

    def _invalidate(self) -> None:
        self._selection.clear()
        self._search.clear()

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def insert_row(self, after_index: int) -> MutationResult:
        """Insert one empty row after *after_index* (``-1`` inserts at the top)."""
        if after_index < -1:
            raise InvalidIndex("row", after_index)
        n_rows = self._store.row_count()
        if after_index >= n_rows:
            return MutationResult(
                op="insert", axis="row", index=after_index, applied=False,
                reason=f"row {after_index} out of range [-1, {n_rows})",
            )
        at = after_index + 1
        rows = self._store.rows()
        rows.insert(at, [])
        self._store.replace_rows(rows)
        self._dims.shift_on_insert("row", at)
        self._invalidate()
        return MutationResult(op="insert", axis="row", index=at, applied=True)

    def delete_row(self, index: int) -> MutationResult:
        """Delete row *index*; refused on a single-row sheet."""
        if index < 0:
            raise InvalidIndex("row", index)
        n_rows = self._store.row_count()
        if n_rows <= 1:
            return MutationResult(
                op="delete", axis="row", index=index, applied=False,
                reason="Cannot delete the only row",
            )
        if index >= n_rows:
            return MutationResult(
                op="delete", axis="row", index=index, applied=False,
                reason=f"row {index} out of range [0, {n_rows})",
            )
        rows = self._store.rows()
        rows.pop(index)
        self._store.replace_rows(rows)
        self._dims.shift_on_delete("row", index)
        self._invalidate()
        return MutationResult(op="delete", axis="row", index=index, applied=True)

    def delete_rows(self, first: int, last: int) -> MutationResult:
        """Delete rows *first* through *last* inclusive.

        Rows past the end of the sheet are ignored.  Refused when the range
        starts past the end or would remove every row.
        """
        if first > last:
            first, last = last, first
        if first < 0:
            raise InvalidIndex("row", first)
        n_rows = self._store.row_count()
        if first >= n_rows:
            return MutationResult(
                op="delete", axis="row", index=first, applied=False,
                reason=f"row {first} out of range [0, {n_rows})",
            )
        last = min(last, n_rows - 1)
        count = last - first + 1
        if count >= n_rows:
            return MutationResult(
                op="delete", axis="row", index=first, applied=False,
                reason="Cannot delete every row",
            )
        rows = self._store.rows()
        del rows[first:last + 1]
        self._store.replace_rows(rows)
        for index in range(last, first - 1, -1):
            self._dims.shift_on_delete("row", index)
        self._invalidate()
        return MutationResult(op="delete", axis="row", index=first, applied=True, count=count)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def insert_column(self, after_index: int) -> MutationResult:
        """Insert one empty column after *after_index* (``-1`` inserts first).

        Only rows that physically reach the insertion point are touched;
        shorter rows stay logically padded.
        """
        if after_index < -1:
            raise InvalidIndex("col", after_index)
        n_cols = self._store.col_bound()
        if after_index >= n_cols:
            return MutationResult(
                op="insert", axis="col", index=after_index, applied=False,
                reason=f"col {after_index} out of range [-1, {n_cols})",
            )
        at = after_index + 1
        rows = self._store.rows()
        for cells in rows:
            if len(cells) >= at:
                cells.insert(at, EMPTY)
        self._store.replace_rows(rows)
        self._dims.shift_on_insert("col", at)
        self._invalidate()
        return MutationResult(op="insert", axis="col", index=at, applied=True)

    def delete_column(self, index: int) -> MutationResult:
        """Delete column *index*; refused when at most one column exists."""
        if index < 0:
            raise InvalidIndex("col", index)
        n_cols = self._store.max_cols()
        if n_cols <= 1:
            return MutationResult(
                op="delete", axis="col", index=index, applied=False,
                reason="Cannot delete the only column",
            )
        if index >= n_cols:
            return MutationResult(
                op="delete", axis="col", index=index, applied=False,
                reason=f"col {index} out of range [0, {n_cols})",
            )
        rows = self._store.rows()
        for cells in rows:
            if len(cells) > index:
                del cells[index]
        self._store.replace_rows(rows)
        self._dims.shift_on_delete("col", index)
        self._invalidate()
        return MutationResult(op="delete", axis="col", index=index, applied=True)
