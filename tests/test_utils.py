"""Unit tests for the numeric and format-sniffing helpers."""

import math
from unittest.mock import patch

import pytest

from dicelog.utils import (
    compare_numbers,
    equate_numbers,
    format_number,
    generate_number,
    is_base64,
    is_json,
    is_numeric,
    sum_array,
)


class TestIsNumeric:
    @pytest.mark.parametrize("value", [5, -3, 0, 1.5, "5", " 7", "-2", "12abc"])
    def test_numeric(self, value) -> None:
        assert is_numeric(value) is True

    @pytest.mark.parametrize(
        "value", [None, "", "abc", "%", "F", [1], (1,), {}, True, math.inf, math.nan]
    )
    def test_not_numeric(self, value) -> None:
        assert is_numeric(value) is False


class TestIsBase64:
    def test_valid(self) -> None:
        assert is_base64("aGVsbG8=")
        assert is_base64("YWJj")

    def test_unpadded_is_rejected(self) -> None:
        assert not is_base64("aGVsbG8")

    def test_plain_text(self) -> None:
        assert not is_base64("hello world")

    def test_empty_and_non_strings(self) -> None:
        assert not is_base64("")
        assert not is_base64(None)
        assert not is_base64(123)


class TestIsJson:
    def test_object_and_array(self) -> None:
        assert is_json('{"log": []}')
        assert is_json("[1, 2]")

    def test_primitives_are_not_composite(self) -> None:
        assert not is_json("1")
        assert not is_json('"text"')
        assert not is_json("null")

    def test_invalid(self) -> None:
        assert not is_json("{not json")
        assert not is_json("")
        assert not is_json(None)

    def test_already_decoded(self) -> None:
        assert not is_json({"log": []})


class TestGenerateNumber:
    def test_equal_bounds(self) -> None:
        assert generate_number(5, 5) == 5

    def test_reversed_bounds_return_min(self) -> None:
        for _ in range(20):
            assert generate_number(5, 3) == 5

    def test_defaults(self) -> None:
        assert generate_number() == 1
        assert generate_number(4) == 4

    def test_in_range(self) -> None:
        for _ in range(50):
            assert 1 <= generate_number(1, 6) <= 6

    def test_string_bounds(self) -> None:
        with patch("dicelog.utils.random.randint", return_value=7) as randint:
            assert generate_number("2", "9") == 7
        randint.assert_called_once_with(2, 9)

    def test_fractional_bounds_truncate(self) -> None:
        assert generate_number("3.5", "3.5") == 3
        with patch("dicelog.utils.random.randint", return_value=5) as randint:
            assert generate_number(2.7, "6.9") == 5
        randint.assert_called_once_with(2, 6)

    def test_trailing_text_ignored(self) -> None:
        assert generate_number("4abc", "4xyz") == 4

    def test_unparseable_bounds_fall_back(self) -> None:
        assert generate_number("abc") == 1
        assert generate_number("5", "abc") == 5


class TestSumArray:
    def test_sums_numbers(self) -> None:
        assert sum_array([1, 2, 3]) == 6

    def test_numeric_strings_and_floats(self) -> None:
        assert sum_array([1.5, "2", 0.5]) == 4

    def test_non_numeric_items_count_as_zero(self) -> None:
        assert sum_array([1, "x", None, [2], 3]) == 4

    def test_non_list(self) -> None:
        assert sum_array("123") == 0
        assert sum_array(None) == 0
        assert sum_array([]) == 0


class TestEquateNumbers:
    def test_default_adds(self) -> None:
        assert equate_numbers(3, 4) == 7

    def test_subtract(self) -> None:
        assert equate_numbers(3, 4, "-") == -1

    def test_multiply(self) -> None:
        assert equate_numbers(3, 4, "*") == 12

    def test_divide(self) -> None:
        assert equate_numbers(10, 4, "/") == 2.5

    def test_divide_by_zero(self) -> None:
        assert equate_numbers(10, 0, "/") == 0

    def test_non_numeric_operands_are_zero(self) -> None:
        assert equate_numbers("a", 4) == 4
        assert equate_numbers(4, None, "*") == 0

    def test_unknown_operator_adds(self) -> None:
        assert equate_numbers(3, 4, "%") == 7


class TestCompareNumbers:
    @pytest.mark.parametrize(
        ("a", "b", "operator", "expected"),
        [
            (3, 3, "=", True),
            (3, 3, "==", True),
            (3, 4, "=", False),
            (3, 4, "<", True),
            (4, 3, ">", True),
            (3, 3, "<=", True),
            (3, 3, ">=", True),
            (2, 3, ">=", False),
            (2, 3, "!=", True),
            (3, 3, "!", False),
            ("5", 5, "=", True),
        ],
    )
    def test_operators(self, a, b, operator, expected) -> None:
        assert compare_numbers(a, b, operator) is expected

    def test_unknown_operator(self) -> None:
        assert compare_numbers(1, 1, "<>") is False
        assert compare_numbers(1, 1, "") is False

    def test_non_numeric_only_unequal(self) -> None:
        assert compare_numbers("x", 1, "=") is False
        assert compare_numbers("x", 1, "!=") is True


def test_format_number() -> None:
    assert format_number(3.0) == "3"
    assert format_number(-2) == "-2"
    assert format_number(0.75) == "0.75"
