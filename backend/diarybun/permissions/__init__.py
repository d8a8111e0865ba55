# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    ADMIN,
    USER,
    ITEMCREATE,
    ITEMUPDATE,
    ITEMDELETE,
    PERMISSIONUPDATE,
    PERMISSION_DEFINITIONS,
    SYSTEM_PERMISSIONS,
    USER_PERMISSIONS,
    CATALOG_PERMISSIONS,
    DEFAULT_PERMISSIONS,
    PERMISSION_ADMIN_PERMISSIONS,
    ITEM_UPDATE_PERMISSIONS,
    ITEM_DELETE_PERMISSIONS,
    ORDER_VIEW_PERMISSIONS,
)
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "ADMIN",
    "USER",
    "ITEMCREATE",
    "ITEMUPDATE",
    "ITEMDELETE",
    "PERMISSIONUPDATE",
    "PERMISSION_DEFINITIONS",
    "SYSTEM_PERMISSIONS",
    "USER_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "DEFAULT_PERMISSIONS",
    "PERMISSION_ADMIN_PERMISSIONS",
    "ITEM_UPDATE_PERMISSIONS",
    "ITEM_DELETE_PERMISSIONS",
    "ORDER_VIEW_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
]
