# Overview: Role and operation policy package.
# Re-exports all public APIs for flat imports.

from .categories import PermissionCategory
from .roles import Role, ALL_ROLES, is_valid_role
from .definitions import (
    OPERATION_DEFINITIONS,
    USER_OPERATIONS,
    LOGISTICS_OPERATIONS,
    SHOP_OPERATIONS,
    DASHBOARD_OPERATIONS,
)
from .helpers import (
    get_all_operation_codes,
    get_allowed_roles,
    get_role_operations,
    validate_operation_code,
)

__all__ = [
    "PermissionCategory",
    "Role",
    "ALL_ROLES",
    "is_valid_role",
    "OPERATION_DEFINITIONS",
    "USER_OPERATIONS",
    "LOGISTICS_OPERATIONS",
    "SHOP_OPERATIONS",
    "DASHBOARD_OPERATIONS",
    "get_all_operation_codes",
    "get_allowed_roles",
    "get_role_operations",
    "validate_operation_code",
]
