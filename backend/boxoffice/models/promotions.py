from __future__ import annotations

from ..extensions import db
from boxoffice.time_utils import to_utc_z


class PromoCodeDiscount(db.Model):
    """
    Promotional or dynamic discount.

    Scoped to an event (event_id) or to a subscription descriptor
    (subscription_descriptor_id). Reservations reference it by id; pricing
    only ever reads it.
    """
    __tablename__ = "promo_code_discounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=True, index=True)
    subscription_descriptor_id = db.Column(db.String(36), db.ForeignKey("subscription_descriptors.id"), nullable=True, index=True)
    organization_id = db.Column(db.Integer, nullable=True, index=True)

    promo_code = db.Column(db.String(64), nullable=False)

    discount_type = db.Column(db.String(32), nullable=False)  # FIXED_AMOUNT, FIXED_AMOUNT_RESERVATION, PERCENTAGE
    discount_amount = db.Column(db.Integer, nullable=False, default=0)  # cents for FIXED_AMOUNT*, whole percent for PERCENTAGE
    code_type = db.Column(db.String(16), nullable=False, default="PROMO_CODE")  # PROMO_CODE, DYNAMIC

    category_ids = db.Column(db.JSON, nullable=False, default=list)  # empty = every category

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "subscription_descriptor_id": self.subscription_descriptor_id,
            "promo_code": self.promo_code,
            "discount_type": self.discount_type,
            "discount_amount": self.discount_amount,
            "code_type": self.code_type,
            "category_ids": self.category_ids,
            "created_at": to_utc_z(self.created_at),
        }
