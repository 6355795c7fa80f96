"""Tests for the numeric coercer."""

import math

import pytest

from bizense.core.numbers import parse_number


class TestParseNumber:
    def test_currency_and_thousands(self):
        assert parse_number("$1,234.56") == 1234.56

    def test_plain_integer_string(self):
        assert parse_number("3") == 3.0

    def test_empty_string(self):
        assert parse_number("") == 0.0

    def test_letters_only(self):
        assert parse_number("abc") == 0.0

    def test_none(self):
        assert parse_number(None) == 0.0

    def test_negative(self):
        assert parse_number("-12.5") == -12.5

    def test_currency_code_suffix(self):
        assert parse_number("12.50 CAD") == 12.5

    def test_multiple_decimal_points(self):
        assert parse_number("1.2.3") == 0.0

    def test_misplaced_minus(self):
        assert parse_number("12-5") == 0.0

    def test_lone_dot(self):
        assert parse_number(".") == 0.0

    def test_numeric_passthrough(self):
        assert parse_number(7) == 7.0
        assert parse_number(2.25) == 2.25

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_input(self, value):
        assert parse_number(value) == 0.0

    def test_overflowing_digits(self):
        result = parse_number("9" * 400)
        assert result == 0.0
        assert math.isfinite(result)

    @pytest.mark.parametrize("value", [True, False])
    def test_booleans_carry_no_digits(self, value):
        assert parse_number(value) == 0.0
