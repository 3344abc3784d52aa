# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/teapot/routes/auth.py
"""
Staff authentication API routes

- Login throttling to prevent brute-force attacks
- Session management with token-based auth
- Role and landing screen returned so the front-end can gate navigation
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import login_throttle_service
from ..services import permission_service
from ..permissions import landing_screen
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(user) -> dict:
    return {
        "user": user.to_dict(),
        "role": user.role,
        "permissions": sorted(permission_service.get_user_permissions(user.id)),
        "landing_screen": landing_screen(user.role),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        identifier = data.get("username") or data.get("email")
        password = data.get("password")

        if not all([identifier, password]):
            return jsonify({"error": "username/email and password required"}), 400

        user_agent = request.headers.get("User-Agent")
        ip_address = request.remote_addr

        is_locked, seconds_remaining = login_throttle_service.is_account_locked(identifier)
        if is_locked:
            return jsonify({
                "error": "Account temporarily locked due to too many failed login attempts",
                "locked": True,
                "retry_after_seconds": seconds_remaining,
            }), 429  # Too Many Requests

        user = auth_service.authenticate(identifier, password)

        if not user:
            failed_count = login_throttle_service.record_failed_attempt(
                identifier=identifier,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            remaining = login_throttle_service.MAX_FAILED_ATTEMPTS - failed_count

            if remaining <= 0:
                return jsonify({
                    "error": "Account locked due to too many failed login attempts",
                    "locked": True,
                }), 429
            elif remaining <= 3:
                return jsonify({
                    "error": "Invalid credentials",
                    "warning": f"{remaining} attempts remaining before account lockout"
                }), 401
            return jsonify({"error": "Invalid credentials"}), 401

        login_throttle_service.record_successful_login(
            user_id=user.id,
            identifier=identifier,
            ip_address=ip_address,
            user_agent=user_agent
        )

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=user_agent,
            ip_address=ip_address
        )
        current_app.logger.info("User %s signed in", user.username)

        payload = _user_payload(user)
        payload.update({
            "token": token,
            "session": session.to_dict(),
            "message": "Logged in successfully",
        })
        return jsonify(payload), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/lockout-status/<identifier>")
def lockout_status_route(identifier: str):
    """Lockout status for an account (public, used by the login form)."""
    return jsonify(login_throttle_service.get_lockout_status(identifier))


@auth_bp.post("/logout")
def logout_route():
    """Revoke session token (logout). Expects Authorization: Bearer <token>."""
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        if not session_service.revoke_session(token, reason="User logout"):
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logged out successfully"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user with role, permissions and landing screen."""
    return jsonify(_user_payload(g.current_user)), 200
