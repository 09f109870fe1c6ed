"""Unit tests for value interpretation (True Semantics and numbers)."""

from __future__ import annotations

import pytest

from paramix.expressions.errors import InvalidArgumentError, NotANumberError
from paramix.expressions.values import (
    format_bool,
    format_number,
    is_true,
    render_json_value,
    to_index,
    to_number,
)


class TestTrueSemantics:
    """A value is true iff present, non-empty and not the word "false"."""

    @pytest.mark.parametrize("value", ["false", "FALSE", "FaLsE", "", None])
    def test_false_values(self, value: str | None) -> None:
        assert is_true(value) is False

    @pytest.mark.parametrize("value", ["true", "0", "no", " ", "false ", "falsey"])
    def test_true_values(self, value: str) -> None:
        assert is_true(value) is True


class TestNumbers:
    """Test numeric parsing and formatting."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("0", 0.0),
            ("-12", -12.0),
            ("+3.5", 3.5),
            (".5", 0.5),
            ("5.", 5.0),
            ("1e3", 1000.0),
            ("2.5E-1", 0.25),
        ],
    )
    def test_to_number(self, text: str, expected: float) -> None:
        assert to_number(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "0x10", "1_000", "inf", "1e999", "."])
    def test_to_number_rejects(self, text: str) -> None:
        with pytest.raises(NotANumberError) as exc_info:
            to_number(text)
        assert exc_info.value.value == text

    @pytest.mark.parametrize(("text", "expected"), [("3.9", 3), ("-3.9", -3), ("7", 7)])
    def test_to_index_truncates(self, text: str, expected: int) -> None:
        assert to_index(text) == expected

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (-4.0, "-4"),
            (0.0, "0"),
            (-0.0, "0"),
            (2.5, "2.5"),
            (1e21, "1e+21"),
            (123456789.0, "123456789"),
        ],
    )
    def test_format_number(self, number: float, expected: str) -> None:
        assert format_number(number) == expected

    @pytest.mark.parametrize("number", [float("inf"), float("-inf"), float("nan")])
    def test_format_number_rejects_non_finite(self, number: float) -> None:
        with pytest.raises(InvalidArgumentError, match="out of range"):
            format_number(number)

    def test_format_bool(self) -> None:
        assert format_bool(True) == "true"
        assert format_bool(False) == "false"


class TestRenderJsonValue:
    """Test rendering of values found in JSON documents."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("text", "text"),
            (123, "123"),
            (1.5, "1.5"),
            (True, "true"),
            (None, "null"),
            ([1, "a"], '[1,"a"]'),
            ({"k": "é"}, '{"k":"é"}'),
        ],
    )
    def test_render(self, value: object, expected: str) -> None:
        assert render_json_value(value) == expected
