# backend/teapot/routes/inventory.py
"""
Inventory management routes.

SECURITY: All routes require authentication.
- View operations require VIEW_INVENTORY permission
- Adjust operations require ADJUST_INVENTORY permission

Stock is the running total of the inventory account (customer id 1).
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..validation import ValidationError
from ..services import stock_service
from ..services.stock_service import StockAdjustmentError
from ..decorators import require_auth, require_permission


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
@require_permission("VIEW_INVENTORY")
def inventory_summary_route():
    """Current stock, low-stock flag and recent stock changes."""
    try:
        return jsonify(stock_service.get_inventory_summary()), 200
    except Exception:
        current_app.logger.exception("Failed to load inventory data")
        return jsonify({"error": "Failed to load inventory data"}), 500


@inventory_bp.get("/transactions")
@require_auth
@require_permission("VIEW_INVENTORY")
def inventory_transactions_route():
    """Stock change log, newest first. Optional ?limit= (1-500)."""
    limit = request.args.get("limit", type=int)
    if limit is not None and not 1 <= limit <= 500:
        return jsonify({"error": "limit must be between 1 and 500"}), 400

    logs = stock_service.list_stock_logs(limit=limit)
    return jsonify({
        "transactions": [tx.to_dict() for tx in logs],
        "count": len(logs),
    }), 200


@inventory_bp.post("/adjust")
@require_auth
@require_permission("ADJUST_INVENTORY")
def adjust_inventory_route():
    """
    Increase or decrease stock.

    Request body:
    - direction: "increase" | "decrease"
    - amount: positive whole number
    """
    payload = request.get_json(silent=True) or {}
    direction = payload.get("direction")

    try:
        tx = stock_service.adjust_stock(
            direction,
            payload.get("amount"),
            created_by=g.current_user.username,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StockAdjustmentError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Failed to adjust stock"}), 500

    current_app.logger.info(
        "User %s adjusted stock by %+d", g.current_user.username, tx.quantity
    )
    return jsonify({
        "message": f"Stock {'increased' if direction == 'increase' else 'decreased'} successfully",
        "transaction": tx.to_dict(),
        "summary": stock_service.get_inventory_summary(),
    }), 201
