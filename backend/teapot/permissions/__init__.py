# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    INVENTORY_PERMISSIONS,
    PURCHASE_PERMISSIONS,
    REPORT_PERMISSIONS,
    USER_PERMISSIONS,
)
from .roles import (
    DEFAULT_ROLE_PERMISSIONS,
    ROLES,
    ROLE_ADMIN,
    ROLE_INVENTORY,
    ROLE_CUSTOMER,
)
from .helpers import (
    get_all_permission_codes,
    get_role_permissions,
    landing_screen,
    validate_role,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "INVENTORY_PERMISSIONS",
    "PURCHASE_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "USER_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_INVENTORY",
    "ROLE_CUSTOMER",
    "get_all_permission_codes",
    "get_role_permissions",
    "landing_screen",
    "validate_role",
]
