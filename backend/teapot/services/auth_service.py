# Overview: Service-layer operations for staff accounts; passwords, sign-in checks and role changes.

"""
Staff Account Service

WHY: Every stock change and purchase row carries the username of the staff
member who entered it, so each person signs in with their own account.

- bcrypt (cost 12) for stored passwords; plaintext never hits the database
- One fixed role per account: admin / inventory / customer
- Deactivating an account ends its open sessions immediately
"""

import re

import bcrypt

from ..extensions import db
from ..models import User
from ..permissions import validate_role, ROLES
from teapot.time_utils import utcnow


BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 8

_PASSWORD_RULES = (
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"\d", "Password must contain at least one digit"),
    (r"[!@#$%^&*(),.'\":{}|<>]", "Password must contain at least one special character"),
)


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    for pattern, message in _PASSWORD_RULES:
        if not re.search(pattern, password):
            raise PasswordValidationError(message)


def hash_password(password: str) -> str:
    """Strength-check then bcrypt-hash a password; returns the hash as text."""
    validate_password_strength(password)
    digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return digest.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # checkpw is constant-time; a corrupt stored hash simply never matches
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _require_role(role: str) -> None:
    if not validate_role(role):
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise ValueError("User not found")
    return user


def create_user(username: str, email: str, password: str, role: str = "customer") -> User:
    """
    Create a staff account.

    Raises:
        ValueError: unknown role, or the username/email is already taken
        PasswordValidationError: password fails the strength rules
    """
    _require_role(role)

    taken = db.session.query(User.id).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if taken:
        raise ValueError("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(identifier: str, password: str) -> User | None:
    """
    Match an active account by username or email and check its password.

    Stamps last_login_at on success; returns None on any mismatch.
    """
    user = db.session.query(User).filter(
        db.or_(User.username == identifier, User.email == identifier),
        User.is_active.is_(True),
    ).first()

    if user is None or not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def set_role(user_id: int, role: str) -> User:
    _require_role(role)
    user = _get_user(user_id)
    user.role = role
    db.session.commit()
    return user


def set_active(user_id: int, is_active: bool) -> User:
    """Activate or deactivate an account. Deactivation revokes open sessions."""
    user = _get_user(user_id)
    user.is_active = is_active
    db.session.commit()

    if not is_active:
        from .session_service import revoke_all_user_sessions
        revoke_all_user_sessions(user.id, reason="User account deactivated")

    return user
