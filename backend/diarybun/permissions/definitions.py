# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


ADMIN = "ADMIN"
USER = "USER"
ITEMCREATE = "ITEMCREATE"
ITEMUPDATE = "ITEMUPDATE"
ITEMDELETE = "ITEMDELETE"
PERMISSIONUPDATE = "PERMISSIONUPDATE"


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        ADMIN,
        "Administrator",
        "Full access, including other users' orders",
        PermissionCategory.SYSTEM,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        USER,
        "User",
        "Baseline signed-in customer; granted at signup and never removed",
        PermissionCategory.USERS,
    ),
    (
        PERMISSIONUPDATE,
        "Update Permissions",
        "List users and change their permission sets",
        PermissionCategory.USERS,
    ),
]


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        ITEMCREATE,
        "Create Items",
        "Add items to the catalog",
        PermissionCategory.CATALOG,
    ),
    (
        ITEMUPDATE,
        "Update Items",
        "Edit items created by other users",
        PermissionCategory.CATALOG,
    ),
    (
        ITEMDELETE,
        "Delete Items",
        "Elevated item deletion",
        PermissionCategory.CATALOG,
    ),
]


PERMISSION_DEFINITIONS = SYSTEM_PERMISSIONS + USER_PERMISSIONS + CATALOG_PERMISSIONS

# Granted to every account at signup
DEFAULT_PERMISSIONS = [USER]

# Permission sets that gate individual operations (any one suffices)
PERMISSION_ADMIN_PERMISSIONS = {ADMIN, PERMISSIONUPDATE}
ITEM_UPDATE_PERMISSIONS = {ADMIN, ITEMUPDATE}
ITEM_DELETE_PERMISSIONS = {ADMIN, ITEMDELETE}
ORDER_VIEW_PERMISSIONS = {ADMIN}
