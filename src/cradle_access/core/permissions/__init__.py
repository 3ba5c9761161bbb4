"""Permission system: registry, roles, grant resolution and access decisions."""

from cradle_access.core.permissions.models import (
    Permission,
    Role,
    UserRole,
    role_permissions,
    user_permissions,
)
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.resolver import UserGrantResolver
from cradle_access.core.permissions.roles import RoleStore


__all__ = [
    # Models
    "Permission",
    # Services
    "PermissionRegistry",
    "Role",
    "RoleStore",
    "UserGrantResolver",
    "UserRole",
    "role_permissions",
    "user_permissions",
]
