from flask import Blueprint, jsonify, request, current_app

from teapot.decorators import require_auth, require_permission
from teapot.services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_route():
    period = request.args.get("period", "all")

    try:
        return jsonify(dashboard_service.dashboard(period)), 200
    except dashboard_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Failed to load transactions")
        return jsonify({"error": "Error loading transactions"}), 500
