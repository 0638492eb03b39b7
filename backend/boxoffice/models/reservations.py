from __future__ import annotations

from ..extensions import db
from boxoffice.time_utils import to_utc_z


class TicketReservation(db.Model):
    """
    Reservation header: who is buying what, in which currency, under which
    VAT regime. Belongs to exactly one purchase context (an event or a
    subscription descriptor).
    """
    __tablename__ = "tickets_reservations"

    id = db.Column(db.String(36), primary_key=True)
    status = db.Column(db.String(32), nullable=False, default="PENDING", index=True)  # PENDING, OFFLINE_PAYMENT, DEFERRED_OFFLINE_PAYMENT, COMPLETE, CANCELLED

    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=True, index=True)
    subscription_descriptor_id = db.Column(db.String(36), db.ForeignKey("subscription_descriptors.id"), nullable=True, index=True)

    currency_code = db.Column(db.String(3), nullable=False)
    vat_status = db.Column(db.String(32), nullable=True)
    used_vat_percent = db.Column(db.Numeric(7, 3, asdecimal=True), nullable=True)

    promo_code_discount_id = db.Column(db.Integer, db.ForeignKey("promo_code_discounts.id"), nullable=True)
    payment_method = db.Column(db.String(32), nullable=True)  # STRIPE, OFFLINE, ON_SITE, NONE
    user_language = db.Column(db.String(8), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "event_id": self.event_id,
            "subscription_descriptor_id": self.subscription_descriptor_id,
            "currency_code": self.currency_code,
            "vat_status": self.vat_status,
            "used_vat_percent": str(self.used_vat_percent) if self.used_vat_percent is not None else None,
            "promo_code_discount_id": self.promo_code_discount_id,
            "payment_method": self.payment_method,
            "user_language": self.user_language,
            "created_at": to_utc_z(self.created_at),
        }


class Ticket(db.Model):
    __tablename__ = "tickets"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("ticket_categories.id"), nullable=True, index=True)
    reservation_id = db.Column(db.String(36), db.ForeignKey("tickets_reservations.id"), nullable=True, index=True)
    status = db.Column(db.String(32), nullable=False, default="PENDING")

    # Amounts in cents, as attributed when the ticket was reserved
    src_price_cts = db.Column(db.Integer, nullable=False, default=0)
    currency_code = db.Column(db.String(3), nullable=True)

    # Per-ticket override, e.g. an exempt category inside a taxed reservation
    vat_status = db.Column(db.String(32), nullable=True)

    # Set when the ticket was paid for with a pre-existing subscription
    subscription_id = db.Column(db.String(36), db.ForeignKey("subscriptions.id"), nullable=True, index=True)

    reservation = db.relationship("TicketReservation", backref=db.backref("tickets", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "event_id": self.event_id,
            "category_id": self.category_id,
            "reservation_id": self.reservation_id,
            "status": self.status,
            "src_price_cts": self.src_price_cts,
            "currency_code": self.currency_code,
            "vat_status": self.vat_status,
            "subscription_id": self.subscription_id,
        }


class AdditionalService(db.Model):
    """Donation or supplement sold alongside tickets of an event."""
    __tablename__ = "additional_services"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    service_type = db.Column(db.String(16), nullable=False, default="SUPPLEMENT")  # DONATION, SUPPLEMENT
    vat_type = db.Column(db.String(16), nullable=False, default="INHERITED")  # INHERITED, NONE, CUSTOM_INCLUDED, CUSTOM_EXCLUDED
    vat = db.Column(db.Numeric(7, 3, asdecimal=True), nullable=True)  # only for CUSTOM_* vat types
    src_price_cts = db.Column(db.Integer, nullable=True)
    currency_code = db.Column(db.String(3), nullable=True)
    ordinal = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "service_type": self.service_type,
            "vat_type": self.vat_type,
            "vat": str(self.vat) if self.vat is not None else None,
            "src_price_cts": self.src_price_cts,
            "currency_code": self.currency_code,
            "ordinal": self.ordinal,
        }


class AdditionalServiceText(db.Model):
    __tablename__ = "additional_service_texts"
    __table_args__ = (
        db.UniqueConstraint("additional_service_id", "locale", "text_type", name="uq_additional_service_text"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    additional_service_id = db.Column(db.Integer, db.ForeignKey("additional_services.id"), nullable=False, index=True)
    locale = db.Column(db.String(8), nullable=False)
    text_type = db.Column(db.String(16), nullable=False, default="TITLE")  # TITLE, DESCRIPTION
    value = db.Column(db.Text, nullable=False, default="")


class AdditionalServiceItem(db.Model):
    __tablename__ = "additional_service_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), nullable=False, unique=True)
    reservation_id = db.Column(db.String(36), db.ForeignKey("tickets_reservations.id"), nullable=False, index=True)
    additional_service_id = db.Column(db.Integer, db.ForeignKey("additional_services.id"), nullable=False, index=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default="PENDING")

    src_price_cts = db.Column(db.Integer, nullable=False, default=0)
    currency_code = db.Column(db.String(3), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uuid": self.uuid,
            "reservation_id": self.reservation_id,
            "additional_service_id": self.additional_service_id,
            "status": self.status,
            "src_price_cts": self.src_price_cts,
            "currency_code": self.currency_code,
        }


class Subscription(db.Model):
    """
    A purchased subscription. Either bought in a subscription reservation
    (``reservation_id``) or later applied to fund tickets of an event
    reservation (tickets point to it via ``subscription_id``).
    """
    __tablename__ = "subscriptions"

    id = db.Column(db.String(36), primary_key=True)
    subscription_descriptor_id = db.Column(db.String(36), db.ForeignKey("subscription_descriptors.id"), nullable=False, index=True)
    reservation_id = db.Column(db.String(36), db.ForeignKey("tickets_reservations.id"), nullable=True, index=True)
    organization_id = db.Column(db.Integer, nullable=True)

    src_price_cts = db.Column(db.Integer, nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=True)
    status = db.Column(db.String(32), nullable=False, default="PENDING")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    descriptor = db.relationship("SubscriptionDescriptor")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subscription_descriptor_id": self.subscription_descriptor_id,
            "reservation_id": self.reservation_id,
            "src_price_cts": self.src_price_cts,
            "currency": self.currency,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }
