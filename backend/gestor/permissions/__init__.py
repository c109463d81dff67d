# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .categories import Role, Module, Action
from .definitions import (
    DEFAULT_ROLE_PERMISSIONS,
    MANAGER_PERMISSIONS,
    ADMIN_PERMISSIONS,
    SALES_PERMISSIONS,
    WAREHOUSE_PERMISSIONS,
)
from .helpers import validate_role_table, load_role_table

__all__ = [
    "Role",
    "Module",
    "Action",
    "DEFAULT_ROLE_PERMISSIONS",
    "MANAGER_PERMISSIONS",
    "ADMIN_PERMISSIONS",
    "SALES_PERMISSIONS",
    "WAREHOUSE_PERMISSIONS",
    "validate_role_table",
    "load_role_table",
]
