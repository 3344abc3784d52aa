# Overview: Service-layer operations for permissions; role lookups and the security event log.

"""
Permission Checks and Security Log

WHY: The role decides which screens a staff member can reach. Roles are
fixed (see teapot.permissions), so checks resolve the role on the user row
instead of joining permission tables.

- Fails closed: inactive users and unknown roles get nothing
- Only denials are logged; admin account changes log their own events
"""

from ..extensions import db
from ..models import User, SecurityEvent
from ..permissions import get_role_permissions
from teapot.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Append a row to security_events and commit it.

    event_type is one of PERMISSION_DENIED, USER_CREATED, USER_UPDATED
    (sign-in events are written by login_throttle_service).
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )
    db.session.add(event)
    db.session.commit()
    return event


def get_user_permissions(user_id: int) -> set[str]:
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return set()
    return get_role_permissions(user.role)


def user_has_permission(user_id: int, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user_id)


def require_permission(
    user_id: int,
    permission_code: str,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Log and raise PermissionDeniedError unless the user's role grants the code."""
    if user_has_permission(user_id, permission_code):
        return

    reason = f"Missing permission: {permission_code}"
    log_security_event(
        user_id=user_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=permission_code,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    raise PermissionDeniedError(reason)
