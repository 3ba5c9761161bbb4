"""User grant resolution.

This module computes a user's effective permission set: the union of the
permissions of every role the user holds and the permissions granted to
the user directly.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select, union
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.permissions.models import (
    Permission,
    UserRole,
    role_permissions,
    user_permissions,
)


if TYPE_CHECKING:
    from cradle_access.modules.users.models import User


class UserGrantResolver:
    """Service for checking a user's global permissions.

    Results are cached per user for the lifetime of the resolver, which is
    one request. Multiple roles are unioned; no role priority applies here.
    Checks never raise for unknown slugs; they are simply not held.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._cache: dict[UUID, frozenset[str]] = {}

    async def effective_permissions(self, user: "User") -> frozenset[str]:
        """Get every permission slug the user holds.

        Args:
            user: The user to resolve

        Returns:
            Slugs granted through roles or directly
        """
        cached = self._cache.get(user.id)
        if cached is not None:
            return cached

        via_roles = (
            select(Permission.slug)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == role_permissions.c.role_id)
            .where(UserRole.user_id == user.id)
        )
        direct = (
            select(Permission.slug)
            .join(user_permissions, user_permissions.c.permission_id == Permission.id)
            .where(user_permissions.c.user_id == user.id)
        )
        result = await self.session.execute(union(via_roles, direct))

        permissions = frozenset(result.scalars().all())
        self._cache[user.id] = permissions
        return permissions

    async def has_permission(self, user: "User", slug: str) -> bool:
        """Check if a user holds a permission."""
        return slug in await self.effective_permissions(user)

    async def has_any_permission(self, user: "User", slugs: Iterable[str]) -> bool:
        """Check if a user holds at least one of the permissions."""
        permissions = await self.effective_permissions(user)
        return any(slug in permissions for slug in slugs)

    async def has_all_permissions(self, user: "User", slugs: Iterable[str]) -> bool:
        """Check if a user holds every one of the permissions."""
        permissions = await self.effective_permissions(user)
        return all(slug in permissions for slug in slugs)

    def clear(self, user_id: UUID | None = None) -> None:
        """Forget cached results for one user, or for everyone."""
        if user_id is None:
            self._cache.clear()
        else:
            self._cache.pop(user_id, None)
