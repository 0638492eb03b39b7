# Overview: Order summary generation; itemized, display-ready rows for tickets, services, discounts and subscriptions.

"""
Order Summary Service

Builds the itemization shown on the reservation page, in confirmation
emails and on invoices. Rows are produced in a fixed order:

1. one TICKET row per category (plus a zero TAX_DETAIL row after exempt groups)
2. one ADDITIONAL_SERVICE row per purchased additional service
3. one PROMOTION_CODE / DYNAMIC_DISCOUNT row when a discount is attached
4. SUBSCRIPTION rows (subscription reservations) or one
   APPLIED_SUBSCRIPTION row (event tickets paid with a subscription)

Callers must not re-sort the rows.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from boxoffice.money import format_cents, format_unit, round_cents
from .discount_service import Discount, format_discount_amount
from .price_calculator import TotalPrice, build_ticket_containers, is_funded_by, priced_containers
from .price_container import (
    PriceContainer,
    VatStatus,
    from_additional_service_item,
    from_subscription,
    is_vat_exempt,
    summary_price_before_vat_cts,
)
from .reservation_cost_service import (
    ReservationItems,
    load_reservation_items,
    cost_of_items,
    find_purchase_context,
    find_subscriptions,
    load_categories,
    reservation_vat_status,
    total_cost_for_items,
)

logger = logging.getLogger(__name__)

OFFLINE_PAYMENT = "OFFLINE_PAYMENT"
DEFERRED_OFFLINE_PAYMENT = "DEFERRED_OFFLINE_PAYMENT"
ON_SITE = "ON_SITE"


class CategoryNotFoundError(Exception):
    """Raised when a ticket references a category that cannot be loaded."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class SummaryType(str, Enum):
    TICKET = "TICKET"
    TAX_DETAIL = "TAX_DETAIL"
    ADDITIONAL_SERVICE = "ADDITIONAL_SERVICE"
    PROMOTION_CODE = "PROMOTION_CODE"
    DYNAMIC_DISCOUNT = "DYNAMIC_DISCOUNT"
    SUBSCRIPTION = "SUBSCRIPTION"
    APPLIED_SUBSCRIPTION = "APPLIED_SUBSCRIPTION"


@dataclass(frozen=True)
class SummaryRow:
    description: Optional[str]
    unit_price: str
    unit_price_before_vat: str
    quantity: int
    sub_total: str
    sub_total_before_vat: str
    raw_sub_total_cts: int
    type: SummaryType
    vat_status: Optional[VatStatus]
    discount_code: Optional[str] = None
    tax_percentage: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["vat_status"] = self.vat_status.value if self.vat_status else None
        return data


@dataclass(frozen=True)
class OrderSummary:
    total_price: TotalPrice
    summary: tuple
    free: bool
    total_price_formatted: str
    total_vat_formatted: str
    waiting_for_payment: bool
    deferred_payment: bool
    cash_payment: bool
    vat_percentage: Optional[str]
    vat_status: Optional[VatStatus]

    def to_dict(self) -> dict:
        return {
            "total_price": self.total_price.to_dict(),
            "summary": [row.to_dict() for row in self.summary],
            "free": self.free,
            "total_price_formatted": self.total_price_formatted,
            "total_vat_formatted": self.total_vat_formatted,
            "waiting_for_payment": self.waiting_for_payment,
            "deferred_payment": self.deferred_payment,
            "cash_payment": self.cash_payment,
            "vat_percentage": self.vat_percentage,
            "vat_status": self.vat_status.value if self.vat_status else None,
        }


# =============================================================================
# ROW BUILDERS
# =============================================================================

def _category_name(categories_by_id: dict, category_id) -> str:
    category = categories_by_id.get(category_id)
    if category is None:
        raise CategoryNotFoundError("Ticket category not found", details={"category_id": category_id})
    return category.name


def _ticket_rows(containers: list[PriceContainer], reservation_vat_status: VatStatus,
                 categories_by_id: dict, currency_code) -> list[SummaryRow]:
    groups: dict = {}
    for container in containers:
        groups.setdefault(container.category_id, []).append(container)

    ordered = list(groups.items())
    if len({c.vat_status for c in containers}) > 1:
        # exempt groups first; sort is stable so ties keep first-seen order
        ordered.sort(key=lambda entry: entry[1][0].vat_status.ordinal, reverse=True)

    rows = []
    for category_id, group in ordered:
        first = group[0]
        sub_total = sum(c.summary_src_price_cts for c in group)
        sub_total_before_vat = summary_price_before_vat_cts(group)
        rows.append(SummaryRow(
            description=_category_name(categories_by_id, category_id),
            unit_price=format_cents(first.summary_src_price_cts, currency_code),
            unit_price_before_vat=format_cents(first.summary_price_before_vat_cts, currency_code),
            quantity=len(group),
            sub_total=format_cents(sub_total, currency_code),
            sub_total_before_vat=format_cents(sub_total_before_vat, currency_code),
            raw_sub_total_cts=sub_total,
            type=SummaryType.TICKET,
            vat_status=first.vat_status,
        ))
        if is_vat_exempt(first.vat_status) and first.vat_status is not reservation_vat_status:
            rows.append(SummaryRow(
                description=None,
                unit_price="",
                unit_price_before_vat="",
                quantity=0,
                sub_total=format_cents(0, currency_code, True),
                sub_total_before_vat=format_cents(0, currency_code, True),
                raw_sub_total_cts=0,
                type=SummaryType.TAX_DETAIL,
                vat_status=first.vat_status,
                tax_percentage="0",
            ))
    return rows


def _best_title(service, texts, locale: Optional[str], default_locale: Optional[str]) -> str:
    titles = [t for t in texts if (t.text_type or "TITLE").upper() == "TITLE"]
    by_locale = {t.locale: t.value for t in titles}
    if locale and locale in by_locale:
        return by_locale[locale]
    logger.debug("additional service %s: title not found for locale %s", service.id, locale)
    if default_locale and default_locale in by_locale:
        return by_locale[default_locale]
    return titles[0].value if titles else ""


def _additional_service_rows(additional_services, service_texts: dict, reservation_vat_status,
                             purchase_context, locale, default_locale, currency_code) -> list[SummaryRow]:
    rows = []
    for service, items in additional_services:
        if not items:
            continue
        containers = [
            from_additional_service_item(item, service, reservation_vat_status, purchase_context)
            for item in items
        ]
        first = containers[0]
        sub_total = sum(c.summary_src_price_cts for c in containers)
        sub_total_before_vat = summary_price_before_vat_cts(containers)
        rows.append(SummaryRow(
            description=_best_title(service, service_texts.get(service.id, []), locale, default_locale),
            unit_price=format_cents(first.summary_src_price_cts, currency_code),
            unit_price_before_vat=format_cents(first.summary_price_before_vat_cts, currency_code),
            quantity=len(containers),
            sub_total=format_cents(sub_total, currency_code),
            sub_total_before_vat=format_cents(sub_total_before_vat, currency_code),
            raw_sub_total_cts=sub_total,
            type=SummaryType.ADDITIONAL_SERVICE,
            vat_status=first.vat_status,
        ))
    return rows


def _promo_label(discount: Discount, tickets, categories_by_id: dict, dynamic_discount_label: str) -> str:
    if discount.dynamic:
        return dynamic_discount_label
    if not discount.categories:
        return discount.code
    matched = sorted({t.category_id for t in tickets if t.category_id in discount.categories})
    if not matched:
        return discount.code
    names = ", ".join(_category_name(categories_by_id, category_id) for category_id in matched)
    return f"{discount.code} ({names})"


def _discount_row(discount: Discount, total_price: TotalPrice, containers: list[PriceContainer], tickets,
                  categories_by_id, reservation_vat_status, dynamic_discount_label, currency_code) -> SummaryRow:
    """
    The sub total is the drop in gross price, so that it offsets item rows
    shown before discount, VAT on top included. TotalPrice.discount_cts
    stays the plain discount.
    """
    amount = format_discount_amount(discount, currency_code)
    gross = -round_cents(sum((c.gross_discount for c in containers), Decimal(0)))
    before_vat = -round_cents(sum((c.net_discount for c in containers), Decimal(0)))
    return SummaryRow(
        description=_promo_label(discount, tickets, categories_by_id, dynamic_discount_label),
        unit_price=amount,
        unit_price_before_vat=amount,
        quantity=total_price.discount_applied_count,
        sub_total=format_cents(gross, currency_code),
        sub_total_before_vat=format_cents(before_vat, currency_code),
        raw_sub_total_cts=gross,
        type=SummaryType.DYNAMIC_DISCOUNT if discount.dynamic else SummaryType.PROMOTION_CODE,
        vat_status=reservation_vat_status,
        discount_code=None if discount.dynamic else discount.code,
    )


def _subscription_rows(subscriptions, descriptor, discount, reservation_vat_status,
                       locale, default_locale, currency_code) -> list[SummaryRow]:
    logger.debug("extract summary: %d subscriptions to include", len(subscriptions))
    rows = []
    for subscription in subscriptions:
        container = from_subscription(subscription, descriptor, reservation_vat_status, discount)
        price = container.summary_src_price_cts
        before_vat = container.summary_price_before_vat_cts
        rows.append(SummaryRow(
            description=descriptor.title_for(locale, default_locale),
            unit_price=format_cents(price, currency_code),
            unit_price_before_vat=format_cents(before_vat, currency_code),
            quantity=1,
            sub_total=format_cents(price, currency_code),
            sub_total_before_vat=format_cents(before_vat, currency_code),
            raw_sub_total_cts=price,
            type=SummaryType.SUBSCRIPTION,
            vat_status=reservation_vat_status,
        ))
    return rows


def _applied_subscription_row(subscription, descriptor, ticket_containers, reservation_vat_status,
                              locale, default_locale, currency_code) -> Optional[SummaryRow]:
    funded = [c for c in ticket_containers if c.subscription_id == subscription.id]
    if not funded:
        return None
    price = sum(c.summary_src_price_cts for c in funded)
    before_vat = summary_price_before_vat_cts(funded)
    return SummaryRow(
        description=descriptor.title_for(locale, default_locale) if descriptor is not None else None,
        unit_price=format_cents(-price, currency_code),
        unit_price_before_vat=format_cents(-before_vat, currency_code),
        quantity=len(funded),
        sub_total=format_cents(-price, currency_code),
        sub_total_before_vat=format_cents(-before_vat, currency_code),
        raw_sub_total_cts=-price,
        type=SummaryType.APPLIED_SUBSCRIPTION,
        vat_status=reservation_vat_status,
    )


def build_summary_rows(*, reservation_vat_status, purchase_context, total_price: TotalPrice,
                       tickets=(), additional_services=(), service_texts=None, subscriptions=(),
                       applied_subscription=None, applied_subscription_descriptor=None,
                       discount: Discount | None = None, categories_by_id=None,
                       locale: Optional[str] = None, default_locale: Optional[str] = None,
                       dynamic_discount_label: str = "") -> list[SummaryRow]:
    """
    Ordered summary rows for an explicit set of reservation items.

    Pure: every collaborator value is passed in. ``categories_by_id`` must
    contain every category referenced by ``tickets``.
    """
    reservation_vat_status = VatStatus.parse(reservation_vat_status, VatStatus.NONE)
    categories_by_id = categories_by_id or {}
    service_texts = service_texts or {}
    currency_code = total_price.currency_code
    tickets = list(tickets)

    ticket_containers = build_ticket_containers(
        reservation_vat_status, purchase_context, discount, tickets, applied_subscription,
    )

    rows: list[SummaryRow] = []
    if purchase_context.is_event:
        rows.extend(_ticket_rows(ticket_containers, reservation_vat_status, categories_by_id, currency_code))

    rows.extend(_additional_service_rows(
        additional_services, service_texts, reservation_vat_status,
        purchase_context, locale, default_locale, currency_code,
    ))

    if discount is not None:
        containers = priced_containers(
            reservation_vat_status, purchase_context, discount, tickets, additional_services,
            subscriptions if purchase_context.is_subscription else (), applied_subscription,
        )
        rows.append(_discount_row(
            discount, total_price, containers, [t for t in tickets if not is_funded_by(t, applied_subscription)],
            categories_by_id, reservation_vat_status, dynamic_discount_label, currency_code,
        ))

    if purchase_context.is_subscription:
        rows.extend(_subscription_rows(
            list(subscriptions), purchase_context, discount, reservation_vat_status,
            locale, default_locale, currency_code,
        ))
    elif applied_subscription is not None:
        row = _applied_subscription_row(
            applied_subscription, applied_subscription_descriptor, ticket_containers,
            reservation_vat_status, locale, default_locale, currency_code,
        )
        if row is not None:
            rows.append(row)

    return rows


def extract_summary(items: ReservationItems, total_price: TotalPrice, locale: Optional[str] = None,
                    default_locale: Optional[str] = None, dynamic_discount_label: str = "") -> list[SummaryRow]:
    return build_summary_rows(
        reservation_vat_status=items.reservation_vat_status,
        purchase_context=items.purchase_context,
        total_price=total_price,
        tickets=items.tickets,
        additional_services=items.additional_services,
        service_texts=items.service_texts,
        subscriptions=items.subscriptions,
        applied_subscription=items.applied_subscription,
        applied_subscription_descriptor=items.applied_subscription_descriptor,
        discount=items.discount,
        categories_by_id=items.categories_by_id,
        locale=locale,
        default_locale=default_locale,
        dynamic_discount_label=dynamic_discount_label,
    )


# =============================================================================
# ORDER SUMMARY
# =============================================================================

def _formatted_vat_percentage(reservation, purchase_context, currency_code) -> Optional[str]:
    # the rate frozen on the reservation wins over the current one
    vat = reservation.used_vat_percent if reservation.used_vat_percent is not None else purchase_context.vat
    if vat is None:
        return None
    return format_unit(vat, currency_code)


def _order_summary(reservation, purchase_context, total_price: TotalPrice, rows) -> OrderSummary:
    currency_code = reservation.currency_code
    return OrderSummary(
        total_price=total_price,
        summary=tuple(rows),
        free=total_price.free,
        total_price_formatted=format_cents(total_price.price_with_vat_cts, currency_code),
        total_vat_formatted=format_cents(total_price.vat_cts, currency_code),
        waiting_for_payment=reservation.status == OFFLINE_PAYMENT,
        deferred_payment=reservation.status == DEFERRED_OFFLINE_PAYMENT,
        cash_payment=reservation.payment_method == ON_SITE,
        vat_percentage=_formatted_vat_percentage(reservation, purchase_context, currency_code),
        vat_status=VatStatus.parse(reservation.vat_status),
    )


def order_summary_for_reservation(reservation_or_id, locale: Optional[str] = None, *,
                                  default_locale: Optional[str] = None,
                                  dynamic_discount_label: str = "") -> OrderSummary:
    """
    Full order summary of a stored reservation.

    ``locale`` defaults to the reservation's user language.
    """
    items = load_reservation_items(reservation_or_id)
    total_price, _ = cost_of_items(items)
    reservation = items.reservation
    rows = extract_summary(
        items,
        total_price,
        locale or reservation.user_language or default_locale,
        default_locale,
        dynamic_discount_label,
    )
    return _order_summary(reservation, items.purchase_context, total_price, rows)


def order_summary_for_credit_note(reservation, removed_tickets, locale: Optional[str] = None, *,
                                  default_locale: Optional[str] = None) -> OrderSummary:
    """
    Summary of the tickets removed from a reservation, for a credit note.

    No discount and no additional services are credited; subscriptions of
    the reservation are listed as purchased.
    """
    purchase_context = find_purchase_context(reservation)
    removed_tickets = list(removed_tickets)
    subscriptions = find_subscriptions(reservation.id) if purchase_context.is_subscription else []
    total_price, _ = total_cost_for_items(reservation, purchase_context, removed_tickets, subscriptions=subscriptions)
    rows = build_summary_rows(
        reservation_vat_status=reservation_vat_status(reservation, purchase_context),
        purchase_context=purchase_context,
        total_price=total_price,
        tickets=removed_tickets,
        subscriptions=subscriptions,
        categories_by_id=load_categories(removed_tickets),
        locale=locale or reservation.user_language or default_locale,
        default_locale=default_locale,
    )
    return _order_summary(reservation, purchase_context, total_price, rows)
