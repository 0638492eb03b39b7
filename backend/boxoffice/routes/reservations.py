from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..services import order_summary_service, reservation_cost_service
from ..services.discount_service import DiscountError
from ..services.order_summary_service import CategoryNotFoundError
from ..services.reservation_cost_service import ReservationCostError, ReservationNotFoundError

reservations_bp = Blueprint("reservations", __name__, url_prefix="/api/reservations")


@reservations_bp.get("/<reservation_id>/cost")
def get_reservation_cost(reservation_id: str):
    """
    Total cost of a reservation, VAT included.

    Returns the total and the discount that produced it (if any).
    """
    try:
        total_price, discount = reservation_cost_service.total_reservation_cost_with_vat(reservation_id)
        return jsonify({
            "total_price": total_price.to_dict(),
            "discount": discount.to_dict() if discount else None,
        }), 200

    except ReservationNotFoundError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except (ReservationCostError, DiscountError) as e:
        current_app.logger.exception("Failed to price reservation %s", reservation_id)
        return jsonify({"error": str(e), "details": e.details}), 500
    except Exception:
        current_app.logger.exception("Failed to price reservation %s", reservation_id)
        return jsonify({"error": "Internal server error"}), 500


@reservations_bp.get("/<reservation_id>/summary")
def get_reservation_summary(reservation_id: str):
    """
    Itemized order summary of a reservation.

    Query params:
        lang: language of titles (defaults to the reservation's language)
    """
    try:
        summary = order_summary_service.order_summary_for_reservation(
            reservation_id,
            request.args.get("lang"),
            default_locale=current_app.config["DEFAULT_LOCALE"],
            dynamic_discount_label=current_app.config["DYNAMIC_DISCOUNT_LABEL"],
        )
        return jsonify({"order_summary": summary.to_dict()}), 200

    except ReservationNotFoundError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except (ReservationCostError, CategoryNotFoundError, DiscountError) as e:
        current_app.logger.exception("Failed to build order summary for reservation %s", reservation_id)
        return jsonify({"error": str(e), "details": e.details}), 500
    except Exception:
        current_app.logger.exception("Failed to build order summary for reservation %s", reservation_id)
        return jsonify({"error": "Internal server error"}), 500
