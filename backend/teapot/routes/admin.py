# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/teapot/routes/admin.py
"""
Admin routes for staff account management.

Provides endpoints for:
- User listing and creation
- Role changes and deactivation

All endpoints require authentication and the admin-only user permissions.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..models import User
from ..permissions import ROLES, ROLE_CUSTOMER, validate_role
from ..services import auth_service, permission_service
from ..services.auth_service import PasswordValidationError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError
from ..decorators import require_auth, require_permission

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

USER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"username", "email", "password", "role"},
    required_on_create={"username", "email", "password"},
)

USER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"role", "is_active"},
)


def _audit(event_type: str, action: str) -> None:
    permission_service.log_security_event(
        user_id=g.current_user.id,
        event_type=event_type,
        success=True,
        resource=request.path,
        action=action,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )


@admin_bp.get("/users")
@require_auth
@require_permission("VIEW_USERS")
def list_users():
    """
    List staff users.

    Query params:
    - include_inactive: bool (default false) - include deactivated users
    - role: str - filter by role
    """
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    role = request.args.get("role")

    query = db.session.query(User)
    if not include_inactive:
        query = query.filter_by(is_active=True)
    if role:
        query = query.filter_by(role=role)

    users = [user.to_dict() for user in query.order_by(User.username).all()]
    return jsonify({"users": users, "count": len(users)})


@admin_bp.post("/users")
@require_auth
@require_permission("MANAGE_USERS")
def create_user():
    """
    Create a new staff user.

    Request body:
    - username: str (required)
    - email: str (required)
    - password: str (required)
    - role: admin | inventory | customer (default customer)
    """
    try:
        patch = validate_payload(
            model=User,
            payload=request.get_json(silent=True),
            policy=USER_CREATE_POLICY,
            partial=False,
        )
        role = patch.get("role") or ROLE_CUSTOMER
        if not validate_role(role):
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")

        user = auth_service.create_user(
            patch["username"],
            patch["email"],
            str(patch["password"]),
            role=role,
        )
        _audit("USER_CREATED", f"Created user: {user.username}")

        return jsonify({"user": user.to_dict(), "message": "User created successfully"}), 201

    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ValueError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.patch("/users/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def update_user(user_id: int):
    """
    Change a user's role and/or active flag.

    Request body (all optional):
    - role: admin | inventory | customer
    - is_active: bool
    """
    if db.session.get(User, user_id) is None:
        return jsonify({"error": "User not found"}), 404

    try:
        patch = validate_payload(
            model=User,
            payload=request.get_json(silent=True),
            policy=USER_UPDATE_POLICY,
            partial=True,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    if user_id == g.current_user.id and (
        patch.get("is_active") is False or patch.get("role", "admin") != "admin"
    ):
        return jsonify({"error": "You cannot demote or deactivate your own account"}), 400

    try:
        if "role" in patch:
            auth_service.set_role(user_id, patch["role"])
        if "is_active" in patch:
            auth_service.set_active(user_id, patch["is_active"])
        user = db.session.get(User, user_id)
        _audit("USER_UPDATED", f"Updated user: {user.username} {sorted(patch)}")
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict(), "message": "User updated successfully"}), 200
