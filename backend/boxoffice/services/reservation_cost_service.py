# Overview: Service-layer operations for reservation cost; loads line items and delegates to the price calculator.

"""
Reservation Cost Service

Loads everything needed to price one reservation (purchase context, tickets,
additional services, subscriptions, discount, categories) into a read-only
ReservationItems snapshot, then delegates to the pure price calculator.

Two entry points share the same arithmetic:
- total_reservation_cost_with_vat(): the stored reservation
- total_cost_for_items(): an explicit set of items (credit notes, partial
  cancellations)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..extensions import db
from ..models import (
    AdditionalService,
    AdditionalServiceItem,
    AdditionalServiceText,
    Event,
    PromoCodeDiscount,
    Subscription,
    SubscriptionDescriptor,
    Ticket,
    TicketCategory,
    TicketReservation,
)
from .discount_service import Discount
from .price_calculator import TotalPrice, calculate
from .price_container import VatStatus

logger = logging.getLogger(__name__)


class ReservationCostError(Exception):
    """Raised when a reservation cannot be priced."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ReservationNotFoundError(ReservationCostError):
    """Raised for an unknown reservation id."""


class PurchaseContextError(ReservationCostError):
    """Raised when a reservation has no resolvable event or subscription descriptor."""


@dataclass
class ReservationItems:
    """Everything needed to price and summarize one reservation."""
    reservation: TicketReservation
    purchase_context: Event | SubscriptionDescriptor
    tickets: list = field(default_factory=list)
    additional_services: list = field(default_factory=list)  # [(AdditionalService, [AdditionalServiceItem])]
    service_texts: dict = field(default_factory=dict)  # additional_service_id -> [AdditionalServiceText]
    subscriptions: list = field(default_factory=list)
    applied_subscription: Subscription | None = None
    applied_subscription_descriptor: SubscriptionDescriptor | None = None
    discount: Discount | None = None
    categories_by_id: dict = field(default_factory=dict)

    @property
    def reservation_vat_status(self) -> VatStatus:
        return reservation_vat_status(self.reservation, self.purchase_context)


def reservation_vat_status(reservation, purchase_context) -> VatStatus:
    return (
        VatStatus.parse(reservation.vat_status)
        or VatStatus.parse(purchase_context.vat_status)
        or VatStatus.NONE
    )


# =============================================================================
# LOADERS
# =============================================================================

def find_reservation(reservation_id: str) -> TicketReservation:
    reservation = db.session.query(TicketReservation).filter_by(id=reservation_id).first()
    if not reservation:
        raise ReservationNotFoundError("Reservation not found", details={"reservation_id": reservation_id})
    return reservation


def _resolve_reservation(reservation_or_id) -> TicketReservation:
    if isinstance(reservation_or_id, TicketReservation):
        return reservation_or_id
    return find_reservation(reservation_or_id)


def find_purchase_context(reservation: TicketReservation) -> Event | SubscriptionDescriptor:
    context = None
    if reservation.event_id is not None:
        context = db.session.query(Event).filter_by(id=reservation.event_id).first()
    elif reservation.subscription_descriptor_id is not None:
        context = db.session.query(SubscriptionDescriptor).filter_by(id=reservation.subscription_descriptor_id).first()
    if context is None:
        raise PurchaseContextError(
            "Purchase context not found for reservation",
            details={"reservation_id": reservation.id},
        )
    return context


def find_discount(reservation: TicketReservation) -> Discount | None:
    if reservation.promo_code_discount_id is None:
        return None
    promo = db.session.query(PromoCodeDiscount).filter_by(id=reservation.promo_code_discount_id).first()
    if not promo:
        raise ReservationCostError(
            "Promo code discount not found",
            details={"reservation_id": reservation.id, "promo_code_discount_id": reservation.promo_code_discount_id},
        )
    return Discount.from_model(promo)


def find_tickets(reservation_id: str) -> list[Ticket]:
    return db.session.query(Ticket).filter_by(reservation_id=reservation_id).order_by(Ticket.id.asc()).all()


def find_subscriptions(reservation_id: str) -> list[Subscription]:
    return (
        db.session.query(Subscription)
        .filter_by(reservation_id=reservation_id)
        .order_by(Subscription.created_at.asc(), Subscription.id.asc())
        .all()
    )


def find_applied_subscription(reservation_id: str) -> Subscription | None:
    """Subscription used to pay for tickets of an event reservation, if any."""
    return (
        db.session.query(Subscription)
        .join(Ticket, Ticket.subscription_id == Subscription.id)
        .filter(Ticket.reservation_id == reservation_id)
        .order_by(Subscription.id.asc())
        .first()
    )


def collect_additional_service_items(reservation_id: str, event: Event) -> list[tuple[AdditionalService, list[AdditionalServiceItem]]]:
    """Items of the reservation grouped by additional service, services in display order."""
    items = (
        db.session.query(AdditionalServiceItem)
        .filter_by(reservation_id=reservation_id, event_id=event.id)
        .order_by(AdditionalServiceItem.id.asc())
        .all()
    )
    if not items:
        return []

    items_by_service: dict[int, list[AdditionalServiceItem]] = {}
    for item in items:
        items_by_service.setdefault(item.additional_service_id, []).append(item)

    services = (
        db.session.query(AdditionalService)
        .filter(AdditionalService.id.in_(items_by_service.keys()), AdditionalService.event_id == event.id)
        .order_by(AdditionalService.ordinal.asc(), AdditionalService.id.asc())
        .all()
    )
    if len(services) != len(items_by_service):
        missing = sorted(set(items_by_service) - {s.id for s in services})
        raise ReservationCostError("Additional service not found", details={"additional_service_ids": missing})
    return [(service, items_by_service[service.id]) for service in services]


def load_service_texts(service_ids) -> dict[int, list[AdditionalServiceText]]:
    service_ids = list(service_ids)
    if not service_ids:
        return {}
    texts: dict[int, list[AdditionalServiceText]] = {}
    rows = (
        db.session.query(AdditionalServiceText)
        .filter(AdditionalServiceText.additional_service_id.in_(service_ids))
        .order_by(AdditionalServiceText.id.asc())
        .all()
    )
    for text in rows:
        texts.setdefault(text.additional_service_id, []).append(text)
    return texts


def load_categories(tickets) -> dict[int, TicketCategory]:
    """Categories of the given tickets, loaded once with a single query."""
    category_ids = {t.category_id for t in tickets if t.category_id is not None}
    if not category_ids:
        return {}
    categories = db.session.query(TicketCategory).filter(TicketCategory.id.in_(category_ids)).all()
    return {c.id: c for c in categories}


def load_reservation_items(reservation_or_id) -> ReservationItems:
    reservation = _resolve_reservation(reservation_or_id)
    purchase_context = find_purchase_context(reservation)
    tickets = find_tickets(reservation.id)

    additional_services = []
    applied_subscription = None
    applied_descriptor = None
    subscriptions = []

    if purchase_context.is_event:
        additional_services = collect_additional_service_items(reservation.id, purchase_context)
        applied_subscription = find_applied_subscription(reservation.id)
        if applied_subscription is not None:
            applied_descriptor = (
                db.session.query(SubscriptionDescriptor)
                .filter_by(id=applied_subscription.subscription_descriptor_id)
                .first()
            )
    else:
        subscriptions = find_subscriptions(reservation.id)

    logger.debug(
        "loaded reservation %s: %d tickets, %d additional services, %d subscriptions",
        reservation.id, len(tickets), len(additional_services), len(subscriptions),
    )

    return ReservationItems(
        reservation=reservation,
        purchase_context=purchase_context,
        tickets=tickets,
        additional_services=additional_services,
        service_texts=load_service_texts(service.id for service, _ in additional_services),
        subscriptions=subscriptions,
        applied_subscription=applied_subscription,
        applied_subscription_descriptor=applied_descriptor,
        discount=find_discount(reservation),
        categories_by_id=load_categories(tickets),
    )


# =============================================================================
# COST
# =============================================================================

def cost_of_items(items: ReservationItems) -> tuple[TotalPrice, Discount | None]:
    return calculate(
        items.reservation_vat_status,
        items.purchase_context,
        items.discount,
        items.tickets,
        items.additional_services,
        items.subscriptions,
        items.applied_subscription,
    )


def total_reservation_cost_with_vat(reservation_or_id) -> tuple[TotalPrice, Discount | None]:
    """Total cost, VAT included, of a stored reservation."""
    return cost_of_items(load_reservation_items(reservation_or_id))


def total_cost_for_items(
    reservation: TicketReservation,
    purchase_context: Event | SubscriptionDescriptor,
    tickets,
    additional_service_items=(),
    subscriptions=(),
    applied_subscription: Subscription | None = None,
    discount: Discount | None = None,
) -> tuple[TotalPrice, Discount | None]:
    """
    Total cost of an explicit set of items of a reservation.

    Used for credit notes and partial cancellations, where only some of the
    stored items are priced. Arithmetic is identical to the stored path.
    """
    return calculate(
        reservation_vat_status(reservation, purchase_context),
        purchase_context,
        discount,
        list(tickets),
        list(additional_service_items),
        list(subscriptions),
        applied_subscription,
    )
