"""Tests for tagged cell values and number parsing."""

from __future__ import annotations

import datetime
import math

import pytest

from sheetgrid.values import EMPTY, CellKind, CellValue, parse_number


# ────────────────────────────────────────────────────────────────
# parse_number
# ────────────────────────────────────────────────────────────────


class TestParseNumber:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("42", 42.0),
            ("  3.5 ", 3.5),
            ("-1e3", -1000.0),
            ("0", 0.0),
        ],
    )
    def test_numeric_text(self, text: str, expected: float) -> None:
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "1_000", "nan", "inf", "-Infinity", "12abc"])
    def test_non_numeric_text(self, text: str) -> None:
        assert parse_number(text) is None


# ────────────────────────────────────────────────────────────────
# CellValue.from_raw
# ────────────────────────────────────────────────────────────────


class TestFromRaw:
    def test_none_and_empty_string_are_empty(self) -> None:
        assert CellValue.from_raw(None) is EMPTY
        assert CellValue.from_raw("") is EMPTY

    def test_bool_kept_before_int(self) -> None:
        v = CellValue.from_raw(True)
        assert v.kind is CellKind.bool
        assert v.value is True

    def test_numbers_keep_type(self) -> None:
        assert CellValue.from_raw(7).value == 7
        assert CellValue.from_raw(2.5).kind is CellKind.number

    def test_non_finite_float_becomes_text(self) -> None:
        v = CellValue.from_raw(math.inf)
        assert v.kind is CellKind.text

    def test_numeric_string_stays_text(self) -> None:
        """Decoded strings are not re-typed; the decoder decides."""
        v = CellValue.from_raw("12")
        assert v.kind is CellKind.text
        assert v.as_number() == 12.0

    def test_other_objects_stringified(self) -> None:
        v = CellValue.from_raw(datetime.date(2024, 1, 31))
        assert v.kind is CellKind.text
        assert v.text == "2024-01-31"

    def test_cell_value_passthrough(self) -> None:
        v = CellValue(kind=CellKind.text, value="x")
        assert CellValue.from_raw(v) is v


# ────────────────────────────────────────────────────────────────
# CellValue.from_input
# ────────────────────────────────────────────────────────────────


class TestFromInput:
    def test_integer_text(self) -> None:
        v = CellValue.from_input("15")
        assert v.kind is CellKind.number
        assert v.value == 15
        assert isinstance(v.value, int)

    def test_decimal_text(self) -> None:
        v = CellValue.from_input("1.50")
        assert v.kind is CellKind.number
        assert v.value == 1.5

    def test_exponent_text_is_float(self) -> None:
        v = CellValue.from_input("1e2")
        assert isinstance(v.value, float)

    def test_plain_text(self) -> None:
        assert CellValue.from_input("hello").kind is CellKind.text

    def test_blank_is_empty(self) -> None:
        assert CellValue.from_input("").is_empty

    def test_non_string_falls_back_to_raw(self) -> None:
        assert CellValue.from_input(False).kind is CellKind.bool


# ────────────────────────────────────────────────────────────────
# Views
# ────────────────────────────────────────────────────────────────


class TestViews:
    def test_text_forms(self) -> None:
        assert EMPTY.text == ""
        assert CellValue.from_raw(True).text == "true"
        assert CellValue.from_raw(False).text == "false"
        assert CellValue.from_raw(3.0).text == "3"
        assert CellValue.from_raw(0.25).text == "0.25"
        assert CellValue.from_raw(10).text == "10"

    def test_as_number(self) -> None:
        assert CellValue.from_raw(4).as_number() == 4.0
        assert CellValue.from_raw(" 8 ").as_number() == 8.0
        assert CellValue.from_raw("x").as_number() is None
        assert CellValue.from_raw(True).as_number() is None
        assert EMPTY.as_number() is None

    def test_to_raw(self) -> None:
        assert EMPTY.to_raw() is None
        assert CellValue.from_raw("a").to_raw() == "a"

    def test_frozen(self) -> None:
        v = CellValue.from_raw("a")
        with pytest.raises(Exception):
            v.value = "b"  # type: ignore[misc]
