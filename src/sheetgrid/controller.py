"""SheetController -- the command façade over one active sheet.

The controller owns every piece of mutable grid state (cells, sizes,
selection, search, sort toggle, open edit) for the active sheet and
replaces all of it wholesale on a sheet switch.  Each command returns a
frozen :class:`GridSnapshot` for the UI to render.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from sheetgrid.addresses import index_to_col_letter, make_addr
from sheetgrid.clipboard import serialize_range
from sheetgrid.config import DEFAULT_CONFIG
from sheetgrid.dimensions import DimensionTable
from sheetgrid.editing import EditSession
from sheetgrid.errors import DecodeFailure, EngineBusy, UnknownSheet
from sheetgrid.logging import EventType, emit_error, emit_info, emit_warning
from sheetgrid.logging.events import DECODE_FAILED, INDEX_OUT_OF_RANGE, LAST_TRACK_PROTECTED
from sheetgrid.mutation import MutationEngine, MutationResult
from sheetgrid.search import SearchIndex, SearchResult
from sheetgrid.selection import InteractionState, Selection, SelectionModel
from sheetgrid.sorting import SortEngine, SortState
from sheetgrid.stats import ColumnKind, SelectionStats, detect_column_kind, range_stats
from sheetgrid.store import CellStore
from sheetgrid.values import CellValue
from sheetgrid.workbook_io import DecodedWorkbook, decode_workbook

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Sheet1"


# ---------------------------------------------------------------------------
# Snapshot models
# ---------------------------------------------------------------------------


class EditState(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    draft: Any = None


class DimensionsView(BaseModel):
    """Size overrides plus the defaults and frozen-pane offsets."""

    model_config = ConfigDict(frozen=True)

    widths: dict[int, int]
    heights: dict[int, int]
    default_col_width: int
    default_row_height: int
    frozen_rows: int
    frozen_columns: int
    frozen_col_left: tuple[int, ...]
    frozen_row_top: tuple[int, ...]


class GridSnapshot(BaseModel):
    """Immutable view of the controller state after a command."""

    model_config = ConfigDict(frozen=True)

    sheet: str | None
    sheet_names: tuple[str, ...]
    rows: tuple[tuple[CellValue, ...], ...]
    row_count: int
    max_cols: int
    column_names: tuple[str, ...]
    column_kinds: tuple[ColumnKind, ...]
    selection: Selection | None
    interaction: InteractionState
    editing: EditState | None
    dimensions: DimensionsView
    search: SearchResult
    sort: SortState | None
    loading: bool
    load_error: str | None
    last_mutation: MutationResult | None = None

    def text_rows(self) -> list[list[str]]:
        """Cell text padded to ``max_cols``, as a renderer would show it."""
        return [
            [row[c].text if c < len(row) else "" for c in range(self.max_cols)]
            for row in self.rows
        ]


# ---------------------------------------------------------------------------
# SheetController
# ---------------------------------------------------------------------------


class SheetController:
    """Composes store, sizes, selection, search, sort, mutation and editing.

    Parameters
    ----------
    config : dict | None
        Grid configuration (see :data:`sheetgrid.config.DEFAULT_CONFIG`).
    """

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        self.config: dict[str, Any] = dict(DEFAULT_CONFIG)
        self.config.update(config or {})

        # Raw matrices per sheet, in workbook order
        self._workbook: dict[str, list[list[Any]]] = {}
        self.active_sheet: str | None = None

        self.loading = False
        self.load_error: str | None = None
        self.last_mutation: MutationResult | None = None

        self._install(CellStore())

    def _install(self, store: CellStore) -> None:
        """Replace every per-sheet component around *store*."""
        self.store = store
        self.dimensions = DimensionTable(self.config)
        self.selection = SelectionModel(store)
        self.search_index = SearchIndex(store, self.selection)
        self.sorter = SortEngine(store, self.selection, self.search_index)
        self.mutations = MutationEngine(store, self.dimensions, self.selection, self.search_index)
        self.edit = EditSession(store)
        self.last_mutation = None

    def _require_idle(self, command: str) -> None:
        """Raise EngineBusy if a load is in flight."""
        if self.loading:
            raise EngineBusy(command)

    @property
    def sheet_names(self) -> list[str]:
        return list(self._workbook)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def begin_load(self) -> GridSnapshot:
        """Enter the loading state; mutating commands are rejected until done."""
        self.loading = True
        self.load_error = None
        return self.snapshot()

    def load_sheet(self, matrix: Sequence[Sequence[Any] | None], name: str | None = None) -> GridSnapshot:
        """Install *matrix* as the active sheet.

        The matrix is registered under *name* (default: the active sheet's
        name, or ``Sheet1``); other sheets already loaded are kept.
        """
        name = name or self.active_sheet or DEFAULT_SHEET_NAME
        raw = [list(row or []) for row in matrix]
        if self.active_sheet is not None and self.active_sheet != name:
            self._workbook[self.active_sheet] = self.store.to_matrix(pad=False)
        self._workbook[name] = raw
        self._activate(name)
        self.loading = False
        self.load_error = None
        emit_info(
            EventType.sheet_loaded,
            f"Loaded sheet {name!r}",
            {"sheet": name, "rows": self.store.row_count(), "cols": self.store.max_cols()},
        )
        return self.snapshot()

    def load_workbook(
        self,
        sheets: DecodedWorkbook | Mapping[str, Sequence[Sequence[Any] | None]],
        sheet_names: Sequence[str] | None = None,
    ) -> GridSnapshot:
        """Replace the whole workbook and activate its first sheet.

        Args:
            sheets: A decoded workbook, or a mapping of sheet name to matrix.
            sheet_names: Sheet order for a plain mapping (default: mapping order).
        """
        if isinstance(sheets, DecodedWorkbook):
            order = list(sheets.sheet_names)
            matrices: Mapping[str, Sequence[Sequence[Any] | None]] = sheets.sheets
        else:
            order = list(sheet_names) if sheet_names is not None else list(sheets)
            matrices = sheets
        if not order:
            raise ValueError("Workbook has no sheets")
        missing = [n for n in order if n not in matrices]
        if missing:
            raise UnknownSheet(missing[0], list(matrices))

        self._workbook = {n: [list(row or []) for row in matrices[n]] for n in order}
        self.active_sheet = None
        return self.load_sheet(self._workbook[order[0]], order[0])

    def load_file(self, path: Path | str) -> GridSnapshot:
        """Decode *path* and load it as the workbook.

        On failure the previously active sheet stays in place, the error is
        recorded in ``load_error`` and the :class:`DecodeFailure` is re-raised.
        """
        self.begin_load()
        try:
            decoded = decode_workbook(
                path,
                max_rows=self.config.get("max_import_rows_per_sheet"),
                max_cols=self.config.get("max_import_cols_per_sheet"),
            )
        except DecodeFailure as exc:
            self.fail_load(exc)
            raise
        return self.load_workbook(decoded)

    def fail_load(self, error: Exception | str) -> GridSnapshot:
        """Leave the loading state with an error; the previous sheet remains."""
        self.loading = False
        self.load_error = str(error)
        context: dict[str, Any] = {"active_sheet": self.active_sheet}
        if isinstance(error, DecodeFailure):
            context["source"] = error.source
        emit_error(EventType.sheet_load_failed, self.load_error, context, error_code=DECODE_FAILED)
        return self.snapshot()

    def _activate(self, name: str) -> None:
        self.edit.cancel()
        self._install(CellStore.from_matrix(self._workbook[name]))
        self.active_sheet = name

    def switch_sheet(self, name: str) -> GridSnapshot:
        """Make *name* the active sheet.

        Any open edit is cancelled.  The outgoing sheet's cells are kept in
        the workbook; its selection, search, sort toggle and sizes are not.
        """
        self._require_idle("switch_sheet")
        if name not in self._workbook:
            raise UnknownSheet(name, self.sheet_names)
        if self.active_sheet is not None:
            self.edit.cancel()
            self._workbook[self.active_sheet] = self.store.to_matrix(pad=False)
        previous = self.active_sheet
        self._activate(name)
        emit_info(EventType.sheet_switched, f"Switched to sheet {name!r}", {"sheet": name, "previous": previous})
        return self.snapshot()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_begin(self, row: int, col: int, extend: bool = False) -> GridSnapshot:
        self.selection.begin(row, col, extend=extend)
        return self.snapshot()

    def select_extend(self, row: int, col: int) -> GridSnapshot:
        self.selection.extend(row, col)
        return self.snapshot()

    def select_end(self) -> GridSnapshot:
        self.selection.end()
        return self.snapshot()

    def move_focus(self, d_row: int, d_col: int, extend: bool = False) -> GridSnapshot:
        self.selection.move_focus_by(d_row, d_col, extend)
        return self.snapshot()

    def escape(self) -> GridSnapshot:
        """Escape key: cancel any open edit and drop the selection."""
        self.edit.cancel()
        self.selection.clear()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def start_edit(self, row: int | None = None, col: int | None = None, initial_value: Any = None) -> GridSnapshot:
        """Open an edit at (row, col), or at the selection anchor when omitted.

        The draft starts as *initial_value*, or the cell's current text.
        An edit already open on another cell is committed first.
        """
        self._require_idle("start_edit")
        if row is None or col is None:
            if self.selection.selection is None:
                return self.snapshot()
            row = self.selection.selection.start_row
            col = self.selection.selection.start_col
        if initial_value is None:
            initial_value = self.store.get(row, col).text
        previous = (self.edit.row, self.edit.col) if self.edit.is_open else None
        self.edit.start(row, col, initial_value)
        if previous is not None and previous != (row, col):
            self._after_commit(*previous)
        return self.snapshot()

    def set_draft(self, value: Any) -> GridSnapshot:
        self.edit.set_draft(value)
        return self.snapshot()

    def commit_edit(self) -> GridSnapshot:
        """Enter / loss of focus: write the draft into the sheet."""
        self._require_idle("commit_edit")
        self._commit_open_edit()
        return self.snapshot()

    def cancel_edit(self) -> GridSnapshot:
        self.edit.cancel()
        return self.snapshot()

    def _commit_open_edit(self) -> None:
        if not self.edit.is_open:
            return
        row, col = self.edit.row, self.edit.col
        self.edit.commit()
        self._after_commit(row, col)

    def _after_commit(self, row: int, col: int) -> None:
        self.search_index.clear()
        emit_info(
            EventType.cell_committed,
            f"Committed {make_addr(row, col)}",
            {"sheet": self.active_sheet, "row": row, "col": col, "value": self.store.get(row, col).text},
        )

    # ------------------------------------------------------------------
    # Resizing
    # ------------------------------------------------------------------

    def resize_column(self, col: int, delta: int) -> GridSnapshot:
        self._require_idle("resize_column")
        self.dimensions.resize_column(col, delta)
        return self.snapshot()

    def resize_row(self, row: int, delta: int) -> GridSnapshot:
        self._require_idle("resize_row")
        self.dimensions.resize_row(row, delta)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _record_mutation(self, result: MutationResult) -> GridSnapshot:
        self.last_mutation = result
        context = {
            "sheet": self.active_sheet, "op": result.op, "axis": result.axis,
            "index": result.index, "count": result.count,
        }
        if result.applied:
            emit_info(EventType.structure_changed, f"{result.op} {result.axis} at {result.index}", context)
        else:
            code = INDEX_OUT_OF_RANGE if "out of range" in (result.reason or "") else LAST_TRACK_PROTECTED
            emit_warning(EventType.mutation_refused, result.reason or "refused", context, error_code=code)
        logger.debug("mutation %s", result)
        return self.snapshot()

    def insert_row(self, after_index: int) -> GridSnapshot:
        self._require_idle("insert_row")
        self._commit_open_edit()
        return self._record_mutation(self.mutations.insert_row(after_index))

    def delete_row(self, index: int) -> GridSnapshot:
        self._require_idle("delete_row")
        self._commit_open_edit()
        return self._record_mutation(self.mutations.delete_row(index))

    def delete_selected_rows(self) -> GridSnapshot:
        """Delete every row the selection spans; a no-op without a selection."""
        self._require_idle("delete_selected_rows")
        self._commit_open_edit()
        bounds = self.selection.bounds()
        if bounds is None:
            return self.snapshot()
        r0, r1, _, _ = bounds
        return self._record_mutation(self.mutations.delete_rows(r0, r1))

    def insert_column(self, after_index: int) -> GridSnapshot:
        self._require_idle("insert_column")
        self._commit_open_edit()
        return self._record_mutation(self.mutations.insert_column(after_index))

    def delete_column(self, index: int) -> GridSnapshot:
        self._require_idle("delete_column")
        self._commit_open_edit()
        return self._record_mutation(self.mutations.delete_column(index))

    # ------------------------------------------------------------------
    # Sort / search
    # ------------------------------------------------------------------

    def sort_by_column(self, col: int) -> GridSnapshot:
        """Sort rows by *col*; a repeated click on the same column toggles direction."""
        self._require_idle("sort_by_column")
        self._commit_open_edit()
        state = self.sorter.sort_by_column(col)
        emit_info(
            EventType.sort_applied,
            f"Sorted by {index_to_col_letter(col)} ({state.direction.value})",
            {"sheet": self.active_sheet, "col": col, "direction": state.direction.value},
        )
        return self.snapshot()

    def search(self, query: str) -> GridSnapshot:
        result = self.search_index.search(query)
        if result.no_matches:
            emit_info(EventType.search_no_match, "No matches found", {"sheet": self.active_sheet, "query": query})
        elif result.matches:
            emit_info(
                EventType.search_completed,
                f"Found {len(result.matches)} matches",
                {"sheet": self.active_sheet, "query": query, "matches": len(result.matches)},
            )
        return self.snapshot()

    def search_next(self) -> GridSnapshot:
        self.search_index.next()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Copy / export / stats
    # ------------------------------------------------------------------

    def serialize_selection(self) -> str:
        """Tab/newline serialization of the selected rectangle ("" if none)."""
        return serialize_range(self.store, self.selection.bounds())

    def copy_selection(self) -> str:
        """Clipboard copy: serialize the selection and log the copy."""
        text = self.serialize_selection()
        bounds = self.selection.bounds()
        if bounds is not None:
            r0, r1, c0, c1 = bounds
            emit_info(
                EventType.selection_copied,
                f"Copied {r1 - r0 + 1} × {c1 - c0 + 1} cells",
                {"sheet": self.active_sheet, "rows": r1 - r0 + 1, "cols": c1 - c0 + 1},
            )
        return text

    def selection_stats(self) -> SelectionStats | None:
        return range_stats(self.store, self.selection.bounds())

    def export_matrix(self, pad: bool = True) -> list[list[Any]]:
        """The active sheet as plain values, for an external encoder."""
        return self.store.to_matrix(pad=pad)

    def export_workbook(self) -> dict[str, list[list[Any]]]:
        """Every sheet as plain values, the active one reflecting its edits."""
        out = {name: [list(r) for r in m] for name, m in self._workbook.items()}
        if self.active_sheet is not None:
            out[self.active_sheet] = self.store.to_matrix(pad=False)
        return out

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> GridSnapshot:
        store = self.store
        dims = self.dimensions
        max_cols = store.max_cols()
        frozen_cols = min(dims.frozen_columns, max_cols)
        frozen_rows = min(dims.frozen_rows, store.row_count())
        sizes = dims.snapshot()
        editing = None
        if self.edit.is_open:
            editing = EditState(row=self.edit.row, col=self.edit.col, draft=self.edit.draft)
        return GridSnapshot(
            sheet=self.active_sheet,
            sheet_names=tuple(self._workbook),
            rows=tuple(tuple(r) for r in store.rows()),
            row_count=store.row_count(),
            max_cols=max_cols,
            column_names=tuple(index_to_col_letter(c) for c in range(max_cols)),
            column_kinds=tuple(detect_column_kind(store, c) for c in range(max_cols)),
            selection=self.selection.selection,
            interaction=self.selection.state,
            editing=editing,
            dimensions=DimensionsView(
                widths=sizes["widths"],
                heights=sizes["heights"],
                default_col_width=dims.default_col_width,
                default_row_height=dims.default_row_height,
                frozen_rows=dims.frozen_rows,
                frozen_columns=dims.frozen_columns,
                frozen_col_left=tuple(dims.frozen_col_left(c) for c in range(frozen_cols)),
                frozen_row_top=tuple(dims.frozen_row_top(r) for r in range(frozen_rows)),
            ),
            search=self.search_index.result,
            sort=self.sorter.state,
            loading=self.loading,
            load_error=self.load_error,
            last_mutation=self.last_mutation,
        )
