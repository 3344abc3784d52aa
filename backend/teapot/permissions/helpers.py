# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS, LANDING_SCREENS, ROLES


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def validate_role(role):
    """Check if a role name is one of the fixed staff roles."""
    return role in ROLES


def get_role_permissions(role):
    """Permission codes granted by a role (empty for unknown roles)."""
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def landing_screen(role):
    """Screen a user with this role starts on; unknown roles get the purchase screen."""
    return LANDING_SCREENS.get(role, "purchases")
