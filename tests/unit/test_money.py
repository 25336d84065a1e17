"""
Unit tests for money primitives.

Verifies:
- Float inputs convert through their shortest repr
- round2 follows the double arithmetic of printed documents
- round_money rounds half away from zero, never banker's rounding
- Display formatting with thousands separators
- Non-numeric input is rejected
"""

from decimal import ROUND_HALF_EVEN, Decimal

import pytest

from invoice_kernel.domain.money import (
    MONEY_DECIMAL_PLACES,
    format_amount,
    round2,
    round_money,
    to_decimal,
    to_double,
)
from invoice_kernel.exceptions import InputError, InvalidAmountError


class TestToDecimal:

    def test_decimal_passthrough(self):
        value = Decimal("100.50")
        assert to_decimal(value) is value

    def test_int(self):
        assert to_decimal(3500) == Decimal("3500")

    def test_float_uses_shortest_repr(self):
        """0.1 is exactly one tenth, not the binary approximation."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(0.03) == Decimal("0.03")

    def test_string_with_thousands_separator(self):
        assert to_decimal(" 1,234.50 ") == Decimal("1234.50")

    def test_bool_rejected(self):
        with pytest.raises(InvalidAmountError):
            to_decimal(True)

    def test_none_rejected(self):
        with pytest.raises(InvalidAmountError):
            to_decimal(None)

    def test_garbage_string_rejected(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_decimal("not a number")
        assert exc_info.value.value == "not a number"
        assert exc_info.value.code == "INVALID_AMOUNT"

    def test_non_finite_rejected(self):
        with pytest.raises(InvalidAmountError):
            to_decimal(float("nan"))
        with pytest.raises(InvalidAmountError):
            to_decimal("Infinity")

    def test_invalid_amount_is_input_error(self):
        with pytest.raises(InputError):
            to_decimal([1, 2])


class TestRounding:

    def test_default_places(self):
        assert MONEY_DECIMAL_PLACES == 2

    def test_exact_half_rounds_up(self):
        assert round2(Decimal("0.125")) == Decimal("0.13")
        assert round2(Decimal("2.5")) == Decimal("2.50")

    def test_negative_half_rounds_toward_positive(self):
        assert round2(Decimal("-0.125")) == Decimal("-0.12")
        assert round2(Decimal("-0.375")) == Decimal("-0.37")

    def test_binary_representation_decides_ties(self):
        """1.005 is stored as 1.00499999..., so printed documents show 1.00."""
        assert round2(1.005) == Decimal("1.00")
        assert round2(Decimal("1.005")) == Decimal("1.00")
        assert round2("1.005") == Decimal("1.00")

    def test_off_tie_values(self):
        assert round2(Decimal("1.556")) == Decimal("1.56")
        assert round2(Decimal("1.554")) == Decimal("1.55")
        assert round2(Decimal("-1.556")) == Decimal("-1.56")

    def test_result_has_two_places(self):
        assert str(round2(5)) == "5.00"
        assert str(round2(0)) == "0.00"

    def test_negative_that_rounds_to_zero_is_unsigned(self):
        assert str(round2(Decimal("-0.001"))) == "0.00"

    def test_invalid_input_rejected(self):
        with pytest.raises(InvalidAmountError):
            round2("abc")
        with pytest.raises(InvalidAmountError):
            round2(Decimal("1e400"))

    def test_to_double(self):
        assert to_double(Decimal("0.03")) == 0.03
        assert to_double(100.5) == 100.5
        assert to_double("1,000") == 1000.0

    def test_round_money_half_away_from_zero(self):
        assert round_money(Decimal("-0.125")) == Decimal("-0.13")
        assert round_money(Decimal("1.005")) == Decimal("1.01")

    def test_round_money_other_places(self):
        assert round_money(Decimal("1234.5678"), 0) == Decimal("1235")
        assert round_money(Decimal("1234.5678"), 3) == Decimal("1234.568")

    def test_round_money_explicit_mode(self):
        assert round_money(Decimal("0.125"), 2, ROUND_HALF_EVEN) == Decimal("0.12")


class TestFormatAmount:

    def test_thousands_separator(self):
        assert format_amount(1000) == "1,000.00"
        assert format_amount(1234567.89) == "1,234,567.89"
        assert format_amount(123456789.12) == "123,456,789.12"

    def test_zero(self):
        assert format_amount(0) == "0.00"

    def test_small_amounts(self):
        assert format_amount(0.99) == "0.99"
        assert format_amount(0.01) == "0.01"

    def test_custom_decimals(self):
        assert format_amount(1234.5678, 0) == "1,235"
        assert format_amount(1234.5678, 1) == "1,234.6"
        assert format_amount(1234.5678, 3) == "1,234.568"

    def test_rounds_half_away_from_zero(self):
        assert format_amount(1.556) == "1.56"
        assert format_amount(1.554) == "1.55"
        assert format_amount(Decimal("0.125")) == "0.13"

    def test_negative(self):
        assert format_amount(-1234.56) == "-1,234.56"

    def test_negative_zero_has_no_sign(self):
        assert format_amount(Decimal("-0.001")) == "0.00"
        assert format_amount(Decimal("-0")) == "0.00"
