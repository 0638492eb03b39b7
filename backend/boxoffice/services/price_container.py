# Overview: Price container view over tickets, additional-service items and subscriptions; net/VAT/gross derivation.

"""
Price Container

Every priceable line item is reduced to the same four values: source price,
VAT status, VAT percentage and applied discount. Net, VAT and gross amounts
are derived from those four values here and nowhere else.

All derived amounts are exact Decimal cents. The *_cts properties round
half-up and are meant for display; reservation totals sum the exact values
and round once.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Iterable

from boxoffice.money import calc_vat, extract_vat, round_cents
from .discount_service import Discount, applied_discount_cts

ZERO = Decimal(0)


class VatStatus(str, Enum):
    # declaration order is the sort order used by the order summary
    NONE = "NONE"
    INCLUDED = "INCLUDED"
    NOT_INCLUDED = "NOT_INCLUDED"
    INCLUDED_EXEMPT = "INCLUDED_EXEMPT"
    NONE_EXEMPT = "NONE_EXEMPT"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized == "NOT_INCLUDED_EXEMPT":
                return cls.NONE_EXEMPT
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def ordinal(self) -> int:
        return list(VatStatus).index(self)

    @classmethod
    def parse(cls, value, default: "VatStatus | None" = None) -> "VatStatus | None":
        if value is None or value == "":
            return default
        return cls(value)


EXEMPT_STATUSES = frozenset({VatStatus.INCLUDED_EXEMPT, VatStatus.NONE_EXEMPT})

# statuses under which VAT is actually charged to the buyer
CHARGED_STATUSES = frozenset({VatStatus.INCLUDED, VatStatus.NOT_INCLUDED})


def is_vat_exempt(vat_status) -> bool:
    return VatStatus.parse(vat_status) in EXEMPT_STATUSES


class ContainerKind(str, Enum):
    TICKET = "TICKET"
    ADDITIONAL_SERVICE_ITEM = "ADDITIONAL_SERVICE_ITEM"
    SUBSCRIPTION = "SUBSCRIPTION"


@dataclass(frozen=True)
class PriceContainer:
    kind: ContainerKind
    src_price_cts: int
    vat_status: VatStatus
    vat_percentage: Decimal | None
    applied_discount_cts: int = 0
    currency_code: str | None = None
    category_id: int | None = None
    subscription_id: str | None = None
    item_id: object = None
    # donations never receive a discount
    discountable: bool = True

    def __post_init__(self):
        # a discount never turns a price negative
        clamped = max(0, min(self.applied_discount_cts, max(self.src_price_cts, 0)))
        if clamped != self.applied_discount_cts:
            object.__setattr__(self, "applied_discount_cts", clamped)
        if self.vat_percentage is not None and not isinstance(self.vat_percentage, Decimal):
            object.__setattr__(self, "vat_percentage", Decimal(str(self.vat_percentage)))
        if not isinstance(self.vat_status, VatStatus):
            object.__setattr__(self, "vat_status", VatStatus(self.vat_status))

    def with_discount(self, discount_cts: int) -> "PriceContainer":
        return replace(self, applied_discount_cts=discount_cts)

    # ------------------------------------------------------------------
    # derivation
    # ------------------------------------------------------------------

    def _vat_for(self, amount: Decimal) -> Decimal:
        percentage = self.vat_percentage
        if percentage is None:
            return ZERO
        status = self.vat_status
        if status is VatStatus.NOT_INCLUDED:
            return calc_vat(amount, percentage)
        if status is VatStatus.INCLUDED:
            return extract_vat(amount, percentage)
        if status is VatStatus.INCLUDED_EXEMPT:
            # embedded VAT is removed from the price, not charged
            return -extract_vat(amount, percentage)
        if status in (VatStatus.NONE, VatStatus.NONE_EXEMPT):
            return ZERO
        raise ValueError(f"Unsupported VAT status {status}")

    def _final_for(self, amount: Decimal) -> Decimal:
        if self.vat_status is VatStatus.INCLUDED:
            return amount
        return amount + self._vat_for(amount)

    def _net_for(self, amount: Decimal) -> Decimal:
        final = self._final_for(amount)
        if self.vat_status in CHARGED_STATUSES:
            return final - self._vat_for(amount)
        return final

    @property
    def discounted_price(self) -> Decimal:
        return Decimal(self.src_price_cts - self.applied_discount_cts)

    @property
    def vat(self) -> Decimal:
        return self._vat_for(self.discounted_price)

    @property
    def final_price(self) -> Decimal:
        return self._final_for(self.discounted_price)

    @property
    def net_price(self) -> Decimal:
        return self._net_for(self.discounted_price)

    @property
    def vat_cts(self) -> int:
        return round_cents(self.vat)

    @property
    def final_price_cts(self) -> int:
        return round_cents(self.final_price)

    @property
    def net_price_cts(self) -> int:
        return round_cents(self.net_price)

    @property
    def discounted(self) -> bool:
        return self.applied_discount_cts > 0

    # summary view: before discount, so the discount gets its own row

    @property
    def summary_src_price_cts(self) -> int:
        return round_cents(self._final_for(Decimal(self.src_price_cts)))

    @property
    def summary_price_before_vat_cts(self) -> int:
        return round_cents(self._net_for(Decimal(self.src_price_cts)))

    # discount in the same terms as the summary prices

    @property
    def gross_discount(self) -> Decimal:
        return self._final_for(Decimal(self.src_price_cts)) - self.final_price

    @property
    def net_discount(self) -> Decimal:
        return self._net_for(Decimal(self.src_price_cts)) - self.net_price


def summary_price_before_vat_cts(containers: Iterable[PriceContainer]) -> int:
    return sum(c.summary_price_before_vat_cts for c in containers)


def resolve_item_vat_status(item_vat_status, reservation_vat_status, context_vat_status) -> VatStatus:
    """
    VAT status of a single item.

    The item's own status wins; otherwise an exempt reservation makes every
    item exempt; otherwise the purchase context decides.
    """
    own = VatStatus.parse(item_vat_status)
    if own is not None:
        return own
    reservation_status = VatStatus.parse(reservation_vat_status)
    if reservation_status in EXEMPT_STATUSES:
        return reservation_status
    return VatStatus.parse(context_vat_status) or reservation_status or VatStatus.NONE


# ----------------------------------------------------------------------
# factories
# ----------------------------------------------------------------------

def from_ticket(ticket, reservation_vat_status, purchase_context, discount: Discount | None = None) -> PriceContainer:
    return PriceContainer(
        kind=ContainerKind.TICKET,
        src_price_cts=ticket.src_price_cts,
        vat_status=resolve_item_vat_status(ticket.vat_status, reservation_vat_status, purchase_context.vat_status),
        vat_percentage=purchase_context.vat,
        applied_discount_cts=applied_discount_cts(discount, ticket.src_price_cts, ticket.category_id),
        currency_code=purchase_context.currency,
        category_id=ticket.category_id,
        subscription_id=ticket.subscription_id,
        item_id=ticket.id,
    )


def from_additional_service_item(item, service, reservation_vat_status, purchase_context,
                                 discount: Discount | None = None) -> PriceContainer:
    """
    Additional-service items take the same discount as tickets. They have no
    category, so a discount restricted to categories skips them.
    """
    discountable = (service.service_type or "SUPPLEMENT").upper() != "DONATION"
    vat_type = (service.vat_type or "INHERITED").upper()
    if vat_type == "INHERITED":
        vat_status = resolve_item_vat_status(None, reservation_vat_status, purchase_context.vat_status)
        vat_percentage = purchase_context.vat
    elif vat_type == "NONE":
        vat_status, vat_percentage = VatStatus.NONE, None
    elif vat_type == "CUSTOM_INCLUDED":
        vat_status, vat_percentage = VatStatus.INCLUDED, service.vat
    elif vat_type == "CUSTOM_EXCLUDED":
        vat_status, vat_percentage = VatStatus.NOT_INCLUDED, service.vat
    else:
        raise ValueError(f"Unsupported VAT type {vat_type} for additional service {service.id}")

    return PriceContainer(
        kind=ContainerKind.ADDITIONAL_SERVICE_ITEM,
        src_price_cts=item.src_price_cts,
        vat_status=vat_status,
        vat_percentage=vat_percentage,
        applied_discount_cts=applied_discount_cts(discount, item.src_price_cts) if discountable else 0,
        currency_code=purchase_context.currency,
        item_id=item.id,
        discountable=discountable,
    )


def from_subscription(subscription, descriptor, reservation_vat_status, discount: Discount | None = None) -> PriceContainer:
    return PriceContainer(
        kind=ContainerKind.SUBSCRIPTION,
        src_price_cts=subscription.src_price_cts,
        vat_status=resolve_item_vat_status(None, reservation_vat_status, descriptor.vat_status),
        vat_percentage=descriptor.vat,
        applied_discount_cts=applied_discount_cts(discount, subscription.src_price_cts),
        currency_code=descriptor.currency,
        subscription_id=subscription.id,
        item_id=subscription.id,
    )
