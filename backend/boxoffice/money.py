# Overview: Integer-cents money helpers; currency-aware conversion, VAT arithmetic and formatting.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, str, Decimal]

HUNDRED = Decimal("100")
DEFAULT_FRACTION_DIGITS = 2

# ISO-4217 minor units that differ from the default of 2
_FRACTION_DIGITS = {
    # no minor unit
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0,
    "KRW": 0, "PYG": 0, "RWF": 0, "UGX": 0, "UYI": 0, "VND": 0, "VUV": 0,
    "XAF": 0, "XOF": 0, "XPF": 0,
    # thousandths
    "BHD": 3, "IQD": 3, "JOD": 3, "KWD": 3, "LYD": 3, "OMR": 3, "TND": 3,
    # ten-thousandths
    "CLF": 4, "UYW": 4,
}


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str() so 100.999 stays 100.999
        return Decimal(str(value))
    return Decimal(value)


def fraction_digits(currency_code: Optional[str]) -> int:
    """
    Number of minor-unit digits for a currency.

    Unknown or missing codes fall back to 2: this only affects formatting,
    never the integer-cents totals.
    """
    if not currency_code:
        return DEFAULT_FRACTION_DIGITS
    return _FRACTION_DIGITS.get(currency_code.strip().upper(), DEFAULT_FRACTION_DIGITS)


def _quantum(digits: int) -> Decimal:
    return Decimal(1).scaleb(-digits)


def round_cents(amount: Number) -> int:
    """Round a (possibly fractional) amount of cents half-up to an int."""
    return int(_to_decimal(amount).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def cents_to_unit(cents: int, currency_code: Optional[str]) -> Decimal:
    digits = fraction_digits(currency_code)
    unit = Decimal(cents).scaleb(-digits)
    return unit.quantize(_quantum(digits), rounding=ROUND_HALF_UP)


def unit_to_cents(amount: Number, currency_code: Optional[str]) -> int:
    digits = fraction_digits(currency_code)
    return round_cents(_to_decimal(amount).scaleb(digits))


def format_unit(amount: Number, currency_code: Optional[str]) -> str:
    digits = fraction_digits(currency_code)
    value = _to_decimal(amount).quantize(_quantum(digits), rounding=ROUND_HALF_UP)
    return format(value, "f")


def format_cents(cents: int, currency_code: Optional[str], strip_trailing_zero_if_integer: bool = False) -> str:
    """
    Render an amount of cents as a fixed-decimal string.

    format_cents(1000, "EUR") -> "10.00"
    format_cents(1000, "JPY") -> "1000"
    format_cents(0, "EUR", True) -> "0"
    """
    unit = cents_to_unit(cents, currency_code)
    if strip_trailing_zero_if_integer and unit == unit.to_integral_value():
        return format(unit.quantize(Decimal(1)), "f")
    return format(unit, "f")


def calc_vat(amount: Number, vat_percentage: Number) -> Decimal:
    """VAT to add on top of a VAT-exclusive amount. No rounding."""
    return _to_decimal(amount) * _to_decimal(vat_percentage) / HUNDRED


def extract_vat(amount: Number, vat_percentage: Number) -> Decimal:
    """VAT embedded in a VAT-inclusive amount. No rounding."""
    gross = _to_decimal(amount)
    return gross - gross / (Decimal(1) + _to_decimal(vat_percentage) / HUNDRED)


def add_vat(cents: int, vat_percentage: Number) -> int:
    """
    Price in cents with VAT added, rounded half-up to the cent.

    add_vat(10000, "7.50") -> 10750
    add_vat(7407, "8.00") -> 8000
    """
    net = Decimal(cents)
    return round_cents(net + calc_vat(net, vat_percentage))
