"""User grant service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import delete

from cradle_access.api.dependencies import AccessEngine, Registry, Roles
from cradle_access.core.constants import USER_DELETE_ACTION
from cradle_access.core.errors import NotFoundError
from cradle_access.core.permissions.engine import AccessDecisionEngine
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.roles import RoleStore
from cradle_access.modules.devices.models import DeviceUser
from cradle_access.modules.users.models import User
from cradle_access.modules.users.repos import UserRepo, UserRepository


logger = structlog.get_logger()


class UserAccessService:
    """Service for changing what a user may do.

    Covers role membership, direct permission grants and user deletion.
    Every mutation clears the request's cached permission set for the user
    so later checks in the same request see the change.
    """

    def __init__(
        self,
        repo: UserRepository,
        registry: PermissionRegistry,
        roles: RoleStore,
        engine: AccessDecisionEngine,
    ) -> None:
        self.repo = repo
        self.registry = registry
        self.roles = roles
        self.engine = engine

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def assign_role(self, user: User, role_slug: str) -> None:
        """Give a user a role; no-op if already held.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.roles.get_role(role_slug)
        if role in user.roles:
            return

        user.roles.append(role)
        await self._flush(user)
        logger.info("user_role_assigned", user_id=str(user.id), role=role_slug)

    async def remove_role(self, user: User, role_slug: str) -> None:
        """Take a role from a user; no-op if not held.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.roles.get_role(role_slug)
        if role not in user.roles:
            return

        user.roles.remove(role)
        await self._flush(user)
        logger.info("user_role_removed", user_id=str(user.id), role=role_slug)

    async def set_role(self, user: User, role_slug: str) -> None:
        """Replace all of a user's roles with a single role.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.roles.get_role(role_slug)
        previous = sorted(held.slug for held in user.roles)

        user.roles[:] = [role]
        await self._flush(user)
        logger.info(
            "user_role_set",
            user_id=str(user.id),
            role=role_slug,
            previous=previous,
        )

    async def grant_permission(self, user: User, permission_slug: str) -> None:
        """Grant a permission to a user outside any role.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        permission = await self.registry.get(permission_slug)
        if permission in user.direct_permissions:
            return

        user.direct_permissions.append(permission)
        await self._flush(user)
        logger.info(
            "user_permission_granted",
            user_id=str(user.id),
            permission=permission_slug,
        )

    async def revoke_permission(self, user: User, permission_slug: str) -> None:
        """Revoke a direct permission. Role-granted permissions are unaffected.

        Raises:
            UnknownPermissionError: If the slug is not registered
        """
        permission = await self.registry.get(permission_slug)
        if permission not in user.direct_permissions:
            return

        user.direct_permissions.remove(permission)
        await self._flush(user)
        logger.info(
            "user_permission_revoked",
            user_id=str(user.id),
            permission=permission_slug,
        )

    async def delete_user(self, actor: User, user: User) -> None:
        """Delete a user after the access check.

        Raises:
            LastAdminProtectedError: If the user is the last administrator
            AccessDeniedError: If the actor may not delete users
        """
        await self.engine.require(actor, USER_DELETE_ACTION, user)

        user_id = user.id
        await self.repo.session.execute(
            delete(DeviceUser).where(DeviceUser.user_id == user_id)
        )
        await self.repo.delete(user)
        self.engine.resolver.clear(user_id)

        logger.info("user_deleted", user_id=str(user_id), deleted_by=str(actor.id))

    async def _flush(self, user: User) -> None:
        await self.repo.session.flush()
        self.engine.resolver.clear(user.id)


def get_user_access_service(
    repo: UserRepo,
    registry: Registry,
    roles: Roles,
    engine: AccessEngine,
) -> UserAccessService:
    return UserAccessService(repo, registry, roles, engine)


# Type alias for dependency injection
UserAccessSvc = Annotated[UserAccessService, Depends(get_user_access_service)]
