# Overview: Fixed staff roles and the permissions each one grants.

from .definitions import PERMISSION_DEFINITIONS

ROLE_ADMIN = "admin"
ROLE_INVENTORY = "inventory"
ROLE_CUSTOMER = "customer"

ROLES = (ROLE_ADMIN, ROLE_INVENTORY, ROLE_CUSTOMER)

DEFAULT_ROLE_PERMISSIONS = {
    # Admin gets ALL permissions
    ROLE_ADMIN: [perm[0] for perm in PERMISSION_DEFINITIONS],
    ROLE_INVENTORY: [
        "VIEW_INVENTORY",
        "ADJUST_INVENTORY",
    ],
    # Customer-service staff run the purchase screen only
    ROLE_CUSTOMER: [
        "CHECK_PURCHASE",
        "MAKE_PURCHASE",
    ],
}

# Screen a role lands on after sign-in
LANDING_SCREENS = {
    ROLE_ADMIN: "dashboard",
    ROLE_INVENTORY: "inventory",
    ROLE_CUSTOMER: "purchases",
}
