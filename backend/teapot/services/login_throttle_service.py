# Overview: Service-layer operations for sign-in throttling; counts failures in the security log.

"""
Login Throttling

WHY: The sign-in form is public. Too many wrong passwords for one
username/email within LOCKOUT_WINDOW locks that identifier for
LOCKOUT_DURATION, measured from the latest failure.

Attempts are rows in security_events (LOGIN_FAILED / LOGIN_SUCCESS) with the
identifier typed by the user in the action column, so unknown usernames are
throttled the same way as real ones.
"""

from datetime import timedelta

from ..extensions import db
from ..models import SecurityEvent, User
from teapot.time_utils import utcnow, as_utc_naive


MAX_FAILED_ATTEMPTS = 10
LOCKOUT_WINDOW = timedelta(minutes=15)
LOCKOUT_DURATION = timedelta(minutes=15)

LOGIN_RESOURCE = "/api/auth/login"


def _failures(identifier: str):
    return db.session.query(SecurityEvent).filter(
        SecurityEvent.event_type == "LOGIN_FAILED",
        SecurityEvent.action == identifier,
    )


def get_recent_failed_attempts(identifier: str) -> int:
    cutoff = utcnow() - LOCKOUT_WINDOW
    return _failures(identifier).filter(SecurityEvent.occurred_at >= cutoff).count()


def is_account_locked(identifier: str) -> tuple[bool, int | None]:
    """(True, seconds_left) while locked, else (False, None)."""
    if get_recent_failed_attempts(identifier) < MAX_FAILED_ATTEMPTS:
        return False, None

    latest = _failures(identifier).order_by(SecurityEvent.occurred_at.desc()).first()
    if latest is None:
        return False, None

    unlock_at = as_utc_naive(latest.occurred_at) + LOCKOUT_DURATION
    now = utcnow()
    if now >= unlock_at:
        return False, None
    return True, int((unlock_at - now).total_seconds())


def _record(event_type: str, *, user_id, identifier, success, reason, ip_address, user_agent) -> None:
    db.session.add(SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=LOGIN_RESOURCE,
        action=identifier,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    ))
    db.session.commit()


def record_failed_attempt(
    identifier: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
    reason: str = "Invalid credentials",
) -> int:
    """Log a failed sign-in; returns the failure count inside the window."""
    user = db.session.query(User).filter(
        db.or_(User.username == identifier, User.email == identifier)
    ).first()

    _record(
        "LOGIN_FAILED",
        user_id=user.id if user else None,
        identifier=identifier,
        success=False,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return get_recent_failed_attempts(identifier)


def record_successful_login(
    user_id: int,
    identifier: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    _record(
        "LOGIN_SUCCESS",
        user_id=user_id,
        identifier=identifier,
        success=True,
        reason=None,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def get_lockout_status(identifier: str) -> dict:
    """Lockout details for the sign-in form (no account data is revealed)."""
    locked, seconds_left = is_account_locked(identifier)
    return {
        "locked": locked,
        "failed_attempts": get_recent_failed_attempts(identifier),
        "max_attempts": MAX_FAILED_ATTEMPTS,
        "seconds_until_unlock": seconds_left,
    }
