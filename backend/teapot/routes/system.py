# backend/teapot/routes/system.py
"""
System health and version endpoints.
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Customer, User, Transaction
from ..services.purchase_service import RESERVED_CUSTOMER_ID
from teapot.time_utils import utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = {
            "customers": db.session.query(Customer).count(),
            "users": db.session.query(User).count(),
            "transactions": db.session.query(Transaction).count(),
        }
        status = "healthy"
        warning = None
        if db.session.get(Customer, RESERVED_CUSTOMER_ID) is None:
            status = "degraded"
            warning = "Inventory account missing; run `flask system init`"

        result = {
            "status": status,
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "details": details,
        }
        if warning:
            result["warning"] = warning
        return result
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    database_health = check_database_health()
    http_status = 503 if database_health["status"] == "unhealthy" else 200

    return {
        "status": database_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"database": database_health},
    }, http_status


@system_bp.get("/version")
def version():
    """Non-sensitive deployment information."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
    }
