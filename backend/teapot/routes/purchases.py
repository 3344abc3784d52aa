# Overview: Flask API routes for the purchase screen; parses input and returns JSON responses.

# backend/teapot/routes/purchases.py
"""
Purchase limit routes.

- POST /api/purchases/check  {"customer_id": "1234"}
- POST /api/purchases        {"customer_id": "1234", "quantity": 2}

Both return the customer's eligibility (status, remaining, countdown,
in-window transactions). A denied purchase returns 409 with the current
eligibility so the screen can show the countdown.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import purchase_service
from ..services.purchase_service import PurchaseValidationError, PurchaseDeniedError
from ..decorators import require_auth, require_permission


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.post("/check")
@require_auth
@require_permission("CHECK_PURCHASE")
def check_purchase_route():
    payload = request.get_json(silent=True) or {}

    try:
        eligibility = purchase_service.check_eligibility(payload.get("customer_id"))
    except PurchaseValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to check purchase eligibility")
        return jsonify({"error": "An error occurred while checking purchase eligibility"}), 500

    result = eligibility.to_dict()
    if eligibility.is_new_customer:
        result["message"] = f"New customer! They can purchase up to {purchase_service.PURCHASE_LIMIT} items."
    return jsonify(result), 200


@purchases_bp.post("")
@require_auth
@require_permission("MAKE_PURCHASE")
def make_purchase_route():
    payload = request.get_json(silent=True) or {}
    quantity = payload.get("quantity")

    try:
        eligibility = purchase_service.make_purchase(
            payload.get("customer_id"),
            quantity,
            created_by=g.current_user.username,
        )
    except PurchaseValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PurchaseDeniedError as e:
        current_app.logger.info(
            "Purchase denied for customer %s: %s", e.eligibility.customer_id, e
        )
        return jsonify({"error": str(e), "eligibility": e.eligibility.to_dict()}), 409
    except Exception:
        current_app.logger.exception("Failed to record purchase")
        return jsonify({"error": "An error occurred while making the purchase"}), 500

    units = int(quantity)
    current_app.logger.info(
        "User %s recorded purchase of %s for customer %s",
        g.current_user.username, units, eligibility.customer_id,
    )
    return jsonify({
        "message": f"Successfully purchased {units} item{'s' if units > 1 else ''}!",
        "eligibility": eligibility.to_dict(),
    }), 201
