from flask import Blueprint, jsonify, request

from teapot.decorators import require_auth, require_permission
from teapot.services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def get_customer_route(customer_id: int):
    summary = customer_service.customer_summary(customer_id)
    if summary is None:
        return jsonify({"error": "Customer not found"}), 404
    return jsonify({"customer": summary}), 200


@customers_bp.get("/<int:customer_id>/transactions")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def customer_transactions_route(customer_id: int):
    if customer_service.get_customer(customer_id) is None:
        return jsonify({"error": "Customer not found"}), 404

    limit = request.args.get("limit", type=int)
    if limit is not None and not 1 <= limit <= 500:
        return jsonify({"error": "limit must be between 1 and 500"}), 400

    transactions = customer_service.list_customer_transactions(customer_id, limit=limit)
    return jsonify({
        "customer_id": customer_id,
        "transactions": [tx.to_dict() for tx in transactions],
        "count": len(transactions),
    }), 200
