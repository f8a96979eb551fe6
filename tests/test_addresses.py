"""Tests for A1-style address helpers."""

from __future__ import annotations

import pytest

from sheetgrid.addresses import (
    col_letter_to_index,
    index_to_col_letter,
    make_addr,
    parse_addr,
    parse_column,
    parse_range,
)


class TestColumnLetters:
    @pytest.mark.parametrize("idx,letters", [(0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ"), (702, "AAA")])
    def test_both_directions(self, idx: int, letters: str) -> None:
        assert index_to_col_letter(idx) == letters
        assert col_letter_to_index(letters) == idx

    def test_lowercase(self) -> None:
        assert col_letter_to_index("ab") == 27


class TestAddr:
    def test_parse(self) -> None:
        assert parse_addr("C5") == (4, 2)
        assert parse_addr(" b2 ") == (1, 1)

    def test_make(self) -> None:
        assert make_addr(0, 0) == "A1"
        assert make_addr(9, 27) == "AB10"

    @pytest.mark.parametrize("bad", ["", "5C", "A0", "A", "ABCD1", "A-1"])
    def test_invalid(self, bad: str) -> None:
        with pytest.raises(ValueError):
            parse_addr(bad)


class TestRange:
    def test_range(self) -> None:
        assert parse_range("A1:C3") == (0, 0, 2, 2)

    def test_reversed_range_normalized(self) -> None:
        assert parse_range("C3:A1") == (0, 0, 2, 2)

    def test_single_cell(self) -> None:
        assert parse_range("B2") == (1, 1, 1, 1)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_range("A1:ZZ")


class TestParseColumn:
    def test_letters(self) -> None:
        assert parse_column("B") == 1

    def test_digits(self) -> None:
        assert parse_column("3") == 3

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_column("B2")
