from __future__ import annotations

from ..extensions import db
from boxoffice.time_utils import to_utc_z


PURCHASE_CONTEXT_EVENT = "event"
PURCHASE_CONTEXT_SUBSCRIPTION = "subscription"


class PurchaseContextMixin:
    """
    Shared surface of the sellable entities a reservation can belong to.

    Both events and subscription descriptors expose currency, VAT percentage
    and VAT status; the pricing core only relies on these plus
    ``context_type``.
    """
    context_type = ""

    @property
    def is_event(self) -> bool:
        return self.context_type == PURCHASE_CONTEXT_EVENT

    @property
    def is_subscription(self) -> bool:
        return self.context_type == PURCHASE_CONTEXT_SUBSCRIPTION


class Event(PurchaseContextMixin, db.Model):
    __tablename__ = "events"
    __table_args__ = {"sqlite_autoincrement": True}

    context_type = PURCHASE_CONTEXT_EVENT

    id = db.Column(db.Integer, primary_key=True)
    short_name = db.Column(db.String(128), nullable=False, unique=True)
    display_name = db.Column(db.String(255), nullable=False)

    currency = db.Column(db.String(3), nullable=False)
    vat = db.Column(db.Numeric(7, 3, asdecimal=True), nullable=True)  # percentage, NULL = not taxed
    vat_status = db.Column(db.String(32), nullable=False, default="NONE")

    # Languages the event is published in, first one is the default
    locales = db.Column(db.JSON, nullable=False, default=list)
    organization_id = db.Column(db.Integer, nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def default_locale(self) -> str | None:
        return self.locales[0] if self.locales else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.context_type,
            "short_name": self.short_name,
            "display_name": self.display_name,
            "currency": self.currency,
            "vat": str(self.vat) if self.vat is not None else None,
            "vat_status": self.vat_status,
            "locales": self.locales,
            "created_at": to_utc_z(self.created_at),
        }


class SubscriptionDescriptor(PurchaseContextMixin, db.Model):
    """
    A sellable subscription. Acts as purchase context when bought directly,
    and as the source of the localized title when a subscription is applied
    to tickets of an event reservation.
    """
    __tablename__ = "subscription_descriptors"

    context_type = PURCHASE_CONTEXT_SUBSCRIPTION

    id = db.Column(db.String(36), primary_key=True)
    title = db.Column(db.JSON, nullable=False, default=dict)  # {"en": "...", "de": "..."}
    price_cts = db.Column(db.Integer, nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False)
    vat = db.Column(db.Numeric(7, 3, asdecimal=True), nullable=True)
    vat_status = db.Column(db.String(32), nullable=False, default="NONE")
    organization_id = db.Column(db.Integer, nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def default_locale(self) -> str | None:
        return next(iter(self.title), None) if self.title else None

    def title_for(self, locale: str | None, fallback_locale: str | None = None) -> str:
        titles = self.title or {}
        for candidate in (locale, fallback_locale, self.default_locale):
            if candidate and titles.get(candidate):
                return titles[candidate]
        return ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.context_type,
            "title": self.title,
            "price_cts": self.price_cts,
            "currency": self.currency,
            "vat": str(self.vat) if self.vat is not None else None,
            "vat_status": self.vat_status,
            "created_at": to_utc_z(self.created_at),
        }


class TicketCategory(db.Model):
    __tablename__ = "ticket_categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    src_price_cts = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    event = db.relationship("Event", backref=db.backref("categories", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "src_price_cts": self.src_price_cts,
            "is_active": self.is_active,
        }
