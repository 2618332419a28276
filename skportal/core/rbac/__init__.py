"""RBAC (Role-Based Access Control) module for SK Portal.

Maps portal roles to permission sets and provides access control utilities.
"""

from .permissions import Permission, Resource, Action, PERMISSION_DEFINITIONS
from .checker import PermissionChecker, require_permission
from .roles import get_role_permissions

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "PERMISSION_DEFINITIONS",
    "PermissionChecker",
    "require_permission",
    "get_role_permissions",
]
