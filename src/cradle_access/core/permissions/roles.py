"""Role store: named roles and their granted permissions."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.errors import DuplicateSlugError, NotFoundError
from cradle_access.core.permissions.models import Permission, Role
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.resolver import UserGrantResolver


logger = structlog.get_logger()


class RoleStore:
    """Service for creating roles and managing their permission sets.

    Grant and revoke are idempotent attach/detach operations. Both validate
    the slug against the permission registry; ``has_permission`` never does.
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: PermissionRegistry | None = None,
        resolver: UserGrantResolver | None = None,
    ) -> None:
        self.session = session
        self.registry = registry or PermissionRegistry(session)
        self.resolver = resolver

    async def create_role(
        self,
        slug: str,
        name: str,
        description: str | None = None,
    ) -> Role:
        """Create a role with no permissions.

        Raises:
            DuplicateSlugError: If a role with this slug exists
        """
        if await self.find_role(slug) is not None:
            raise DuplicateSlugError(slug, kind="role")

        role = Role(slug=slug, name=name, description=description, permissions=[])
        self.session.add(role)
        await self.session.flush()

        logger.info("role_created", role=slug)
        return role

    async def find_role(self, slug: str) -> Role | None:
        result = await self.session.execute(select(Role).where(Role.slug == slug))
        return result.scalar_one_or_none()

    async def get_role(self, slug: str) -> Role:
        """Get a role by slug.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.find_role(slug)
        if role is None:
            raise NotFoundError(
                f"Role '{slug}' not found",
                error_code="role_not_found",
                resource="role",
                resource_id=slug,
            )
        return role

    async def list_roles(self) -> list[Role]:
        result = await self.session.execute(select(Role).order_by(Role.slug))
        return list(result.scalars().all())

    async def grant(self, role: Role, permission_slug: str) -> None:
        """Attach a permission to a role; no-op if already granted.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        permission = await self.registry.get(permission_slug)
        if permission in role.permissions:
            return

        role.permissions.append(permission)
        await self.session.flush()
        self._forget_resolved()
        logger.info("role_permission_granted", role=role.slug, permission=permission_slug)

    async def revoke(self, role: Role, permission_slug: str) -> None:
        """Detach a permission from a role; no-op if not granted.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        permission = await self.registry.get(permission_slug)
        if permission not in role.permissions:
            return

        role.permissions.remove(permission)
        await self.session.flush()
        self._forget_resolved()
        logger.info("role_permission_revoked", role=role.slug, permission=permission_slug)

    async def toggle(self, role: Role, permission_slug: str) -> bool:
        """Flip a permission on a role.

        Returns:
            True if the role holds the permission afterwards
        """
        if role.has_permission(permission_slug):
            await self.revoke(role, permission_slug)
            return False
        await self.grant(role, permission_slug)
        return True

    def has_permission(self, role: Role, permission_slug: str) -> bool:
        """Check whether a role holds a permission. Unknown slugs are False."""
        return role.has_permission(permission_slug)

    def permissions_of(self, role: Role) -> set[Permission]:
        return set(role.permissions)

    def _forget_resolved(self) -> None:
        # A role change can affect any holder of the role
        if self.resolver is not None:
            self.resolver.clear()
