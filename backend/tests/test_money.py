# Overview: Pytest coverage for currency-aware money helpers.

from decimal import Decimal

import pytest
from boxoffice.money import (
    add_vat,
    calc_vat,
    cents_to_unit,
    extract_vat,
    format_cents,
    format_unit,
    fraction_digits,
    round_cents,
    unit_to_cents,
)


class TestAddVat:
    """VAT added on top of a net amount, rounded half-up to the cent."""

    @pytest.mark.parametrize("cents,percentage,expected", [
        (10000, "7.50", 10750),
        (10000, "8.00", 10800),
        (7407, "8.00", 8000),
        (370, "8.00", 400),
        (648, "8.00", 700),
        (10000, "7.99", 10799),
        (10000, "7.999", 10800),
        (10000, "21.00", 12100),
    ])
    def test_add_vat(self, cents, percentage, expected):
        assert add_vat(cents, Decimal(percentage)) == expected

    def test_add_vat_accepts_string_percentage(self):
        assert add_vat(10000, "7.50") == 10750


class TestConversions:
    """Cents <-> unit conversion by currency fraction digits."""

    def test_cents_to_unit_two_digits(self):
        assert str(cents_to_unit(10000, "CHF")) == "100.00"

    def test_cents_to_unit_zero_digits(self):
        assert str(cents_to_unit(101, "JPY")) == "101"

    def test_cents_to_unit_three_digits(self):
        assert str(cents_to_unit(101000, "BHD")) == "101.000"

    def test_unit_to_cents(self):
        assert unit_to_cents(Decimal("100.00"), "CHF") == 10000

    def test_unit_to_cents_rounds_half_up(self):
        assert unit_to_cents(Decimal("100.999"), "CHF") == 10100
        assert unit_to_cents("100.005", "CHF") == 10001

    def test_unit_to_cents_float_input(self):
        assert unit_to_cents(100.999, "CHF") == 10100

    def test_currency_code_is_case_insensitive(self):
        assert unit_to_cents(Decimal("100.999"), "chf") == unit_to_cents(Decimal("100.999"), "CHF")
        assert fraction_digits("jpy") == 0
        assert fraction_digits("bhd") == 3

    def test_unknown_currency_defaults_to_two_digits(self):
        assert fraction_digits("XYZ") == 2
        assert fraction_digits(None) == 2
        assert format_cents(1000, "XYZ") == "10.00"


class TestFormatting:
    """Fixed-decimal rendering."""

    def test_format_cents(self):
        assert format_cents(1000, "JPY") == "1000"
        assert format_cents(1000, "EUR") == "10.00"
        assert format_cents(1000, "BHD") == "1.000"

    def test_format_negative_amount(self):
        assert format_cents(-100, "EUR") == "-1.00"

    def test_strip_trailing_zero_if_integer(self):
        assert format_cents(0, "EUR", True) == "0"
        assert format_cents(1000, "EUR", True) == "10"
        assert format_cents(1050, "EUR", True) == "10.50"

    def test_format_unit(self):
        assert format_unit(Decimal("12.345"), "EUR") == "12.35"
        assert format_unit(Decimal("12.5"), "JPY") == "13"


class TestVatArithmetic:
    """Exact VAT helpers, no rounding."""

    def test_calc_vat(self):
        assert calc_vat(1000, Decimal("10")) == Decimal("100")

    def test_extract_vat(self):
        assert extract_vat(1100, Decimal("10")) == Decimal("100")

    def test_round_cents_half_up(self):
        assert round_cents(Decimal("0.5")) == 1
        assert round_cents(Decimal("1.49")) == 1
        assert round_cents(Decimal("-0.5")) == -1
