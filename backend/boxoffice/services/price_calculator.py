# Overview: Pure reservation-level price aggregation; turns line items plus a discount into a TotalPrice.

"""
Reservation Price Calculator

WHY: The reservation total is the authoritative amount charged. Item-level
amounts are summed as exact decimals and rounded once, so the total never
drifts by the accumulation of per-item rounding.

No database access here: callers pass every input explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from boxoffice.money import format_cents, round_cents
from .discount_service import Discount, DiscountType, discount_applied_count
from .price_container import (
    PriceContainer,
    from_additional_service_item,
    from_subscription,
    from_ticket,
)


@dataclass(frozen=True)
class TotalPrice:
    price_with_vat_cts: int
    vat_cts: int
    discount_cts: int  # negative magnitude
    discount_applied_count: int
    currency_code: str | None

    @property
    def free(self) -> bool:
        return self.price_with_vat_cts == 0

    @classmethod
    def zero(cls, currency_code: str | None) -> "TotalPrice":
        return cls(0, 0, 0, 0, currency_code)

    def to_dict(self) -> dict:
        return {
            "price_with_vat_cts": self.price_with_vat_cts,
            "vat_cts": self.vat_cts,
            "discount_cts": self.discount_cts,
            "discount_applied_count": self.discount_applied_count,
            "currency_code": self.currency_code,
            "free": self.free,
            "price_with_vat": format_cents(self.price_with_vat_cts, self.currency_code),
            "vat": format_cents(self.vat_cts, self.currency_code),
            "discount": format_cents(self.discount_cts, self.currency_code),
        }


def is_funded_by(ticket, applied_subscription) -> bool:
    """True when the ticket was paid for with the applied subscription."""
    if applied_subscription is None or ticket.subscription_id is None:
        return False
    return ticket.subscription_id == applied_subscription.id


def build_ticket_containers(reservation_vat_status, purchase_context, discount: Discount | None,
                            tickets: Iterable, applied_subscription=None) -> list[PriceContainer]:
    """
    Price containers for every ticket, in input order.

    Tickets funded by the applied subscription are never discounted.
    """
    return [
        from_ticket(
            ticket,
            reservation_vat_status,
            purchase_context,
            None if is_funded_by(ticket, applied_subscription) else discount,
        )
        for ticket in tickets
    ]


def _subscription_descriptor(subscription, purchase_context):
    if getattr(purchase_context, "is_subscription", False):
        return purchase_context
    return subscription.descriptor


def _attribute_reservation_discount(discount: Discount, pools: tuple[list[PriceContainer], ...]) -> None:
    """
    Spread a FIXED_AMOUNT_RESERVATION discount over the eligible items, the
    most expensive first, until the amount is used up. Tickets are served
    first, then subscriptions, then additional-service items. The discount
    therefore never exceeds what the eligible items cost, and never more
    than its amount is taken off the reservation. Mutates the pools in place.
    """
    remaining = discount.amount
    for pool in pools:
        eligible = [
            index for index, container in enumerate(pool)
            if container.discountable and discount.applies_to_category(container.category_id)
        ]
        # stable: equal prices keep input order
        eligible.sort(key=lambda index: pool[index].src_price_cts, reverse=True)
        for index in eligible:
            if remaining <= 0:
                return
            share = min(remaining, max(pool[index].src_price_cts, 0))
            if share:
                pool[index] = pool[index].with_discount(share)
                remaining -= share


def priced_containers(reservation_vat_status, purchase_context, discount: Discount | None,
                      tickets: Sequence, additional_service_items: Sequence = (),
                      subscriptions: Sequence = (), applied_subscription=None) -> list[PriceContainer]:
    """
    Containers of every item the buyer pays for, with the discount attributed.

    Tickets funded by the applied subscription are left out.
    """
    tickets = list(tickets)
    ticket_containers = [
        c for c, ticket in zip(
            build_ticket_containers(reservation_vat_status, purchase_context, discount, tickets, applied_subscription),
            tickets,
        )
        if not is_funded_by(ticket, applied_subscription)
    ]
    service_containers = [
        from_additional_service_item(item, service, reservation_vat_status, purchase_context, discount)
        for service, items in additional_service_items
        for item in items
    ]
    subscription_containers = [
        from_subscription(s, _subscription_descriptor(s, purchase_context), reservation_vat_status, discount)
        for s in subscriptions
    ]

    if discount is not None and discount.discount_type is DiscountType.FIXED_AMOUNT_RESERVATION:
        _attribute_reservation_discount(discount, (ticket_containers, subscription_containers, service_containers))

    return ticket_containers + service_containers + subscription_containers


def calculate(reservation_vat_status, purchase_context, discount: Discount | None,
              tickets: Sequence, additional_service_items: Sequence = (),
              subscriptions: Sequence = (), applied_subscription=None) -> tuple[TotalPrice, Discount | None]:
    """
    Compute the reservation total.

    Args:
        reservation_vat_status: VAT status of the reservation (VatStatus or str)
        purchase_context: event or subscription descriptor (currency, vat, vat_status)
        discount: resolved Discount, or None
        tickets: ticket rows of the reservation
        additional_service_items: list of (additional_service, [items]) pairs
        subscriptions: subscriptions purchased in the reservation
        applied_subscription: subscription used to pay for some tickets

    Returns:
        (TotalPrice, discount)
    """
    currency_code = purchase_context.currency
    containers = priced_containers(
        reservation_vat_status, purchase_context, discount, tickets,
        additional_service_items, subscriptions, applied_subscription,
    )
    if not containers:
        return TotalPrice.zero(currency_code), discount

    final_price = sum((c.final_price for c in containers), Decimal(0))
    vat = sum((c.vat for c in containers), Decimal(0))
    applied_discount = sum(c.applied_discount_cts for c in containers)
    discounted_items = sum(1 for c in containers if c.discounted)

    total = TotalPrice(
        price_with_vat_cts=round_cents(final_price),
        vat_cts=round_cents(vat),
        discount_cts=-applied_discount,
        discount_applied_count=discount_applied_count(discount, discounted_items),
        currency_code=currency_code,
    )
    return total, discount
