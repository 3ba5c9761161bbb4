"""Default permission catalog, roles and role grants.

Seeded by ``cradle-access permissions seed``. Seeding is idempotent:
existing permissions and roles are kept, missing grants are added.
"""

from typing import TypedDict

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.roles import RoleStore


logger = structlog.get_logger()


class PermissionSeed(TypedDict):
    slug: str
    name: str
    description: str
    group: str


class RoleSeed(TypedDict):
    slug: str
    name: str
    description: str


def _perm(slug: str, description: str, name: str | None = None) -> PermissionSeed:
    group = slug.split(".", 1)[0] if "." in slug else "alerts"
    return {"slug": slug, "name": name or slug, "description": description, "group": group}


DEFAULT_PERMISSIONS: list[PermissionSeed] = [
    # Device permissions
    _perm("device.create", "Create new devices"),
    _perm("device.view", "View device details"),
    _perm("device.update", "Update device information"),
    _perm("device.delete", "Delete devices"),
    _perm("device.control", "Control device functions"),
    _perm("device.monitor", "Monitor device status"),
    _perm("device.health", "View device health analytics"),
    _perm("device.manage_users", "Share a device with other users"),
    # User management permissions
    _perm("user.create", "Create new users"),
    _perm("user.view", "View user details"),
    _perm("user.update", "Update user information"),
    _perm("user.delete", "Delete users"),
    # Role management permissions
    _perm("role.create", "Create new roles"),
    _perm("role.view", "View role details"),
    _perm("role.update", "Update role information"),
    _perm("role.delete", "Delete roles"),
    # Monitoring permissions
    _perm("monitoring.view", "View monitoring dashboard"),
    _perm("monitoring.control", "Control monitoring features"),
    _perm("monitoring.alerts", "View and manage alerts"),
    # System permissions
    _perm("system.settings", "Manage system settings"),
    _perm("system.logs", "View system logs"),
    _perm("system.backup", "Manage system backups"),
    # Alert permissions
    _perm("alerts.view", "View device alerts"),
    _perm("alerts.update", "Acknowledge and resolve alerts"),
    _perm("manage_alerts", "Full access to manage alerts", name="Manage Alerts"),
    _perm("view_alerts", "View alerts only", name="View Alerts"),
]

DEFAULT_ROLES: list[RoleSeed] = [
    {
        "slug": "admin",
        "name": "Administrator",
        "description": "System administrator with full access",
    },
    {
        "slug": "parent",
        "name": "Parent",
        "description": "Parent with device management and monitoring access",
    },
    {
        "slug": "babysitter",
        "name": "Babysitter",
        "description": "Babysitter with limited monitoring access",
    },
]

ROLE_GRANTS: dict[str, list[str]] = {
    "admin": [seed["slug"] for seed in DEFAULT_PERMISSIONS],
    "parent": [
        "device.view",
        "device.control",
        "device.monitor",
        "device.health",
        "monitoring.view",
        "monitoring.control",
        "monitoring.alerts",
        "alerts.view",
        "alerts.update",
        "user.view",
        "view_alerts",
    ],
    "babysitter": [
        "device.view",
        "device.monitor",
        "device.health",
        "monitoring.view",
        "monitoring.alerts",
        "alerts.view",
        "alerts.update",
    ],
}


async def seed_defaults(session: AsyncSession) -> dict[str, int]:
    """Create the default catalog, roles and grants where missing.

    Seeded permissions are system-flagged so they cannot be deleted.

    Returns:
        Counts of created permissions, created roles and grants applied
    """
    registry = PermissionRegistry(session)
    roles = RoleStore(session, registry=registry)
    counts = {"permissions": 0, "roles": 0, "grants": 0}

    for seed in DEFAULT_PERMISSIONS:
        if await registry.find(seed["slug"]) is None:
            await registry.register(is_system=True, **seed)
            counts["permissions"] += 1

    for seed in DEFAULT_ROLES:
        role = await roles.find_role(seed["slug"])
        if role is None:
            role = await roles.create_role(**seed)
            counts["roles"] += 1

        for slug in ROLE_GRANTS[seed["slug"]]:
            if not roles.has_permission(role, slug):
                await roles.grant(role, slug)
                counts["grants"] += 1

    logger.info("defaults_seeded", **counts)
    return counts
