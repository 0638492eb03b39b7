# Overview: Discount model for reservation pricing; per-item application rules for promo and dynamic codes.

"""
Discount Model

Promo codes and dynamic discounts share one value object. The four
behaviours (fixed amount per item, fixed amount per reservation,
percentage, dynamic) are dispatched in one place, applied_discount_cts(),
so they are always considered together.

A dynamic discount is a Discount whose code_type is DYNAMIC; its
discount_type (PERCENTAGE or FIXED_AMOUNT) is the sub-type that drives the
arithmetic. Its code is never shown to the buyer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from boxoffice.money import HUNDRED, format_cents, round_cents


class DiscountError(Exception):
    """Raised for malformed discount definitions."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class DiscountType(str, Enum):
    FIXED_AMOUNT = "FIXED_AMOUNT"
    FIXED_AMOUNT_RESERVATION = "FIXED_AMOUNT_RESERVATION"
    PERCENTAGE = "PERCENTAGE"


class CodeType(str, Enum):
    PROMO_CODE = "PROMO_CODE"
    DYNAMIC = "DYNAMIC"


FIXED_AMOUNT_TYPES = frozenset({DiscountType.FIXED_AMOUNT, DiscountType.FIXED_AMOUNT_RESERVATION})


def is_fixed_amount(discount_type: DiscountType) -> bool:
    return discount_type in FIXED_AMOUNT_TYPES


@dataclass(frozen=True)
class Discount:
    """Read-only snapshot of a promo code or dynamic discount."""
    code: str
    discount_type: DiscountType
    amount: int
    categories: frozenset[int] = field(default_factory=frozenset)
    code_type: CodeType = CodeType.PROMO_CODE
    id: int | None = None

    def __post_init__(self):
        if self.amount < 0:
            raise DiscountError("Discount amount cannot be negative", details={"code": self.code, "amount": self.amount})
        if self.discount_type is DiscountType.PERCENTAGE and self.amount > 100:
            raise DiscountError("Percentage discount must be between 0 and 100", details={"code": self.code, "amount": self.amount})
        if self.code_type is CodeType.DYNAMIC and self.discount_type is DiscountType.FIXED_AMOUNT_RESERVATION:
            raise DiscountError("Dynamic discounts are either PERCENTAGE or FIXED_AMOUNT", details={"code": self.code})

    @property
    def dynamic(self) -> bool:
        return self.code_type is CodeType.DYNAMIC

    def applies_to_category(self, category_id: int | None) -> bool:
        """An empty category set means the discount applies to every item."""
        if not self.categories:
            return True
        return category_id in self.categories

    @classmethod
    def from_model(cls, promo) -> "Discount":
        try:
            discount_type = DiscountType(str(promo.discount_type).upper())
            code_type = CodeType(str(promo.code_type or CodeType.PROMO_CODE.value).upper())
        except ValueError as exc:
            raise DiscountError(str(exc), details={"promo_code_discount_id": promo.id}) from exc
        return cls(
            id=promo.id,
            code=promo.promo_code,
            discount_type=discount_type,
            amount=int(promo.discount_amount or 0),
            categories=frozenset(int(c) for c in (promo.category_ids or [])),
            code_type=code_type,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            # the code of a dynamic discount is internal
            "code": None if self.dynamic else self.code,
            "discount_type": self.discount_type.value,
            "amount": self.amount,
            "categories": sorted(self.categories),
            "dynamic": self.dynamic,
        }


def applied_discount_cts(discount: Discount | None, price_cts: int, category_id: int | None = None) -> int:
    """
    Discount in cents that a single item of ``price_cts`` receives.

    Never exceeds the item price. Items outside the discount's categories
    get nothing (soft no-op). FIXED_AMOUNT_RESERVATION returns 0 here: the
    price calculator attributes it once per reservation.
    """
    if discount is None or price_cts <= 0:
        return 0
    if not discount.applies_to_category(category_id):
        return 0

    discount_type = discount.discount_type
    if discount_type is DiscountType.FIXED_AMOUNT:
        return min(discount.amount, price_cts)
    if discount_type is DiscountType.PERCENTAGE:
        amount = round_cents(Decimal(price_cts) * Decimal(discount.amount) / HUNDRED)
        return min(amount, price_cts)
    if discount_type is DiscountType.FIXED_AMOUNT_RESERVATION:
        return 0
    raise DiscountError(f"Unsupported discount type {discount_type}")


def discount_applied_count(discount: Discount | None, discounted_items: int) -> int:
    """
    Quantity shown on the discount row.

    Only FIXED_AMOUNT reports the real number of discounted items when more
    than one item was discounted; other types collapse to a single row "x1".
    A per-reservation discount always counts as applied once.
    """
    if discount is None:
        return 0
    if discounted_items <= 1 or discount.discount_type is DiscountType.FIXED_AMOUNT:
        count = discounted_items
    else:
        count = 1
    if count == 0 and discount.discount_type is DiscountType.FIXED_AMOUNT_RESERVATION:
        count = 1
    return count


def format_discount_amount(discount: Discount, currency_code: str | None) -> str:
    """"-1.00" for fixed amounts, "-10%" for percentages."""
    if is_fixed_amount(discount.discount_type):
        return "-" + format_cents(discount.amount, currency_code)
    return f"-{discount.amount}%"
