"""Permission registry.

The closed catalog of permission slugs. Grant operations validate slugs
here, so a typo fails at administration time instead of silently denying
at check time.
"""

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.errors import (
    DuplicateSlugError,
    PermissionInUseError,
    SystemPermissionProtectedError,
    UnknownPermissionError,
)
from cradle_access.core.permissions.models import (
    Permission,
    role_permissions,
    user_permissions,
)


logger = structlog.get_logger()


class PermissionRegistry:
    """Catalog of registered permissions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def register(
        self,
        slug: str,
        name: str,
        description: str | None = None,
        group: str | None = None,
        parent_slug: str | None = None,
        is_system: bool = False,
    ) -> Permission:
        """Register a new permission.

        Args:
            slug: Unique permission identifier
            name: Display name
            description: Human-readable description
            group: Optional grouping tag
            parent_slug: Optional parent permission (grouping only)
            is_system: Protect the permission from deletion

        Returns:
            The registered permission

        Raises:
            DuplicateSlugError: If the slug is already registered
            UnknownPermissionError: If parent_slug is not registered
        """
        if await self.find(slug) is not None:
            raise DuplicateSlugError(slug, kind="permission")

        parent_id = None
        if parent_slug is not None:
            parent_id = (await self.get(parent_slug)).id

        position = await self.session.scalar(
            select(func.coalesce(func.max(Permission.position), 0))
        )
        permission = Permission(
            slug=slug,
            name=name,
            description=description,
            group=group,
            parent_id=parent_id,
            is_system=is_system,
            position=(position or 0) + 1,
        )
        self.session.add(permission)
        await self.session.flush()

        logger.info(
            "permission_registered",
            slug=slug,
            group=group,
            is_system=is_system,
        )
        return permission

    async def find(self, slug: str) -> Permission | None:
        """Look up a permission by slug; None when not registered."""
        result = await self.session.execute(
            select(Permission).where(Permission.slug == slug)
        )
        return result.scalar_one_or_none()

    async def get(self, slug: str) -> Permission:
        """Look up a permission by slug.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        permission = await self.find(slug)
        if permission is None:
            raise UnknownPermissionError(slug)
        return permission

    async def delete(self, slug: str) -> None:
        """Delete a permission.

        The registry does not cascade: callers detach the permission from
        roles and users first.

        Raises:
            UnknownPermissionError: If the slug is not registered
            SystemPermissionProtectedError: If the permission is system-flagged
            PermissionInUseError: If any role or user still holds it
        """
        permission = await self.get(slug)

        if permission.is_system:
            raise SystemPermissionProtectedError(
                f"Permission '{slug}' is a system permission",
                details={"slug": slug},
            )

        role_refs = await self._count_references(role_permissions, permission)
        user_refs = await self._count_references(user_permissions, permission)
        if role_refs or user_refs:
            raise PermissionInUseError(
                f"Permission '{slug}' is still granted",
                details={"slug": slug, "roles": role_refs, "users": user_refs},
            )

        # Detach children explicitly; SQLite leaves foreign keys unenforced
        await self.session.execute(
            update(Permission)
            .where(Permission.parent_id == permission.id)
            .values(parent_id=None)
        )
        await self.session.delete(permission)
        await self.session.flush()
        logger.info("permission_deleted", slug=slug)

    async def list_by_group(self, group: str) -> list[Permission]:
        """List the permissions of a group in registration order."""
        result = await self.session.execute(
            select(Permission)
            .where(Permission.group == group)
            .order_by(Permission.position)
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Permission]:
        """List the whole catalog in registration order."""
        result = await self.session.execute(
            select(Permission).order_by(Permission.position)
        )
        return list(result.scalars().all())

    async def children_of(self, slug: str) -> list[Permission]:
        """List the direct children of a permission.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        parent = await self.get(slug)
        result = await self.session.execute(
            select(Permission)
            .where(Permission.parent_id == parent.id)
            .order_by(Permission.position)
        )
        return list(result.scalars().all())

    async def _count_references(self, table, permission: Permission) -> int:
        count = await self.session.scalar(
            select(func.count())
            .select_from(table)
            .where(table.c.permission_id == permission.id)
        )
        return count or 0
