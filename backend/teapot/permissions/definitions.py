# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_INVENTORY",
        "View Inventory",
        "View current stock and recent stock changes",
        PermissionCategory.INVENTORY,
    ),
    (
        "ADJUST_INVENTORY",
        "Adjust Inventory",
        "Increase or decrease stock on the inventory account",
        PermissionCategory.INVENTORY,
    ),
]


# -- PURCHASES --

PURCHASE_PERMISSIONS = [
    (
        "CHECK_PURCHASE",
        "Check Purchase Limit",
        "Look up a customer's remaining purchase quota",
        PermissionCategory.PURCHASES,
    ),
    (
        "MAKE_PURCHASE",
        "Make Purchase",
        "Record a purchase against a customer's quota",
        PermissionCategory.PURCHASES,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "Transaction history and aggregate statistics",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_CUSTOMERS",
        "View Customers",
        "Look up customers and their full transaction history",
        PermissionCategory.REPORTS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "List staff accounts",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create staff accounts, change roles, deactivate accounts",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + PURCHASE_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
)
