"""Tests for the single-column sort and its direction toggle."""

from __future__ import annotations

import pytest

from sheetgrid.errors import InvalidIndex
from sheetgrid.search import SearchIndex
from sheetgrid.selection import SelectionModel
from sheetgrid.sorting import (
    SortDirection,
    SortEngine,
    SortState,
    compare_cells,
    next_direction,
    sort_rows,
)
from sheetgrid.store import CellStore
from sheetgrid.values import EMPTY, CellValue


def _col(store: CellStore, col: int) -> list[str]:
    return [store.get(r, col).text for r in range(store.row_count())]


@pytest.fixture
def store() -> CellStore:
    return CellStore.from_matrix([
        ["pear", 10, "x1"],
        ["Apple", "9", "x2"],
        ["banana", 100, "x3"],
        ["apple", 9, "x4"],
        [None, None, "x5"],
    ])


@pytest.fixture
def engine(store: CellStore) -> SortEngine:
    selection = SelectionModel(store)
    return SortEngine(store, selection, SearchIndex(store, selection))


class TestCompareCells:
    def test_numeric_when_both_numeric(self) -> None:
        assert compare_cells(CellValue.from_raw(9), CellValue.from_raw("10")) < 0
        assert compare_cells(CellValue.from_raw("9"), CellValue.from_raw(9)) == 0

    def test_text_is_case_insensitive(self) -> None:
        assert compare_cells(CellValue.from_raw("Apple"), CellValue.from_raw("apple")) == 0
        assert compare_cells(CellValue.from_raw("apple"), CellValue.from_raw("Banana")) < 0

    def test_empty_sorts_first(self) -> None:
        assert compare_cells(EMPTY, CellValue.from_raw("a")) < 0

    def test_mixed_falls_back_to_text(self) -> None:
        # "10" < "9" as text
        assert compare_cells(CellValue.from_raw(10), CellValue.from_raw("9x")) < 0

    def test_accents_collate_with_base_letter(self) -> None:
        assert compare_cells(CellValue.from_raw("e"), CellValue.from_raw("é")) < 0
        assert compare_cells(CellValue.from_raw("é"), CellValue.from_raw("f")) < 0


class TestSortRows:
    def test_numeric_column(self, store: CellStore) -> None:
        rows = sort_rows(store.rows(), 1)
        assert [r[2].text for r in rows] == ["x5", "x2", "x4", "x1", "x3"]

    def test_stable_ascending(self, store: CellStore) -> None:
        rows = sort_rows(store.rows(), 0)
        assert [r[2].text for r in rows] == ["x5", "x2", "x4", "x3", "x1"]

    def test_stable_descending_keeps_tie_order(self, store: CellStore) -> None:
        rows = sort_rows(store.rows(), 0, SortDirection.desc)
        assert [r[2].text for r in rows] == ["x1", "x3", "x2", "x4", "x5"]

    def test_short_rows_read_as_empty(self) -> None:
        rows = [[CellValue.from_raw("b"), CellValue.from_raw("z")], [CellValue.from_raw("a")]]
        out = sort_rows(rows, 1)
        assert [r[0].text for r in out] == ["a", "b"]

    def test_unicode_collation_order(self) -> None:
        rows = [[CellValue.from_raw(t)] for t in ("f", "é", "e", "Z", "a")]
        out = sort_rows(rows, 0)
        assert [r[0].text for r in out] == ["a", "e", "é", "f", "Z"]

    def test_idempotent(self, store: CellStore) -> None:
        once = sort_rows(store.rows(), 0)
        twice = sort_rows(once, 0)
        assert once == twice


class TestDirection:
    def test_first_sort_is_asc(self) -> None:
        assert next_direction(None, 0) is SortDirection.asc

    def test_toggle_same_column(self) -> None:
        prev = SortState(column=1, direction=SortDirection.asc)
        assert next_direction(prev, 1) is SortDirection.desc

    def test_desc_goes_back_to_asc(self) -> None:
        prev = SortState(column=1, direction=SortDirection.desc)
        assert next_direction(prev, 1) is SortDirection.asc

    def test_other_column_resets(self) -> None:
        prev = SortState(column=1, direction=SortDirection.asc)
        assert next_direction(prev, 2) is SortDirection.asc


class TestSortEngine:
    def test_toggle_sequence(self, engine: SortEngine) -> None:
        assert engine.sort_by_column(0).direction is SortDirection.asc
        assert engine.sort_by_column(0).direction is SortDirection.desc
        assert engine.sort_by_column(0).direction is SortDirection.asc
        assert engine.sort_by_column(2).direction is SortDirection.asc

    def test_reorders_store(self, engine: SortEngine, store: CellStore) -> None:
        engine.sort_by_column(1)
        assert _col(store, 1) == ["", "9", "9", "10", "100"]
        engine.sort_by_column(1)
        assert _col(store, 1) == ["100", "10", "9", "9", ""]

    def test_clears_selection_and_search(self, store: CellStore) -> None:
        selection = SelectionModel(store)
        search = SearchIndex(store, selection)
        engine = SortEngine(store, selection, search)
        search.search("apple")
        assert selection.selection is not None
        engine.sort_by_column(0)
        assert selection.selection is None
        assert search.result.matches == ()

    def test_column_beyond_data_keeps_order(self, engine: SortEngine, store: CellStore) -> None:
        engine.sort_by_column(10)
        assert _col(store, 2) == ["x1", "x2", "x3", "x4", "x5"]

    def test_negative_column(self, engine: SortEngine) -> None:
        with pytest.raises(InvalidIndex):
            engine.sort_by_column(-1)
