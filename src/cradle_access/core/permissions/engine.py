"""Access decision engine.

The single entry point every protected action calls before proceeding.
It combines the user's global grants (roles plus direct permissions) with
device-scoped relationship grants. The two sources are OR-composed:
either one is enough to allow, and revoking one never strips the other.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.config import settings
from cradle_access.core.constants import USER_DELETE_ACTION
from cradle_access.core.errors import AccessDeniedError, LastAdminProtectedError
from cradle_access.core.permissions.models import Role, UserRole
from cradle_access.core.permissions.resolver import UserGrantResolver
from cradle_access.modules.devices.ledger import DeviceRelationshipLedger
from cradle_access.modules.devices.models import Device
from cradle_access.modules.users.models import User


logger = structlog.get_logger()


class DenyReason(str, Enum):
    """Machine-readable reason attached to a Deny decision."""

    MISSING_PERMISSION = "missing_permission"
    NOT_OWNER_OR_PERMISSION = "not_owner_or_permission"
    LAST_ADMIN_PROTECTED = "last_admin_protected"


DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.MISSING_PERMISSION: "You do not have permission to perform this action",
    DenyReason.NOT_OWNER_OR_PERMISSION: "You do not have permission to perform this action",
    DenyReason.LAST_ADMIN_PROTECTED: "Cannot remove the last administrator",
}


@runtime_checkable
class OwnedResource(Protocol):
    """A non-device resource that belongs to one user (alerts, babysitter profiles)."""

    @property
    def owner_id(self) -> UUID: ...


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    @property
    def message(self) -> str | None:
        return DENY_MESSAGES[self.reason] if self.reason else None

    def __bool__(self) -> bool:
        return self.allowed


class AccessDecisionEngine:
    """Answers "may this user perform this action on this target?".

    One engine is built per request; its resolver cache lives exactly as
    long. Decisions never raise for missing grants; use ``require`` to get
    an exception instead.
    """

    def __init__(
        self,
        session: AsyncSession,
        resolver: UserGrantResolver | None = None,
        ledger: DeviceRelationshipLedger | None = None,
    ) -> None:
        self.session = session
        self.resolver = resolver or UserGrantResolver(session)
        self.ledger = ledger or DeviceRelationshipLedger(session)

    async def authorize(self, user: User, action: str, target: Any = None) -> Decision:
        """Decide whether a user may perform an action.

        Args:
            user: The acting user
            action: Permission slug of the action
            target: None for global actions, a Device for device-scoped
                actions, a User for user management, or any resource
                exposing ``owner_id``

        Returns:
            Decision.allow() or Decision.deny(reason)

        Raises:
            TypeError: If the target is of an unsupported kind
        """
        if isinstance(target, User):
            decision = await self._authorize_user_target(user, action, target)
        elif target is None:
            decision = await self._authorize_global(user, action)
        elif isinstance(target, Device):
            decision = await self._authorize_device(user, action, target)
        elif isinstance(target, OwnedResource):
            decision = await self._authorize_owned(user, action, target)
        else:
            raise TypeError(f"Unsupported authorization target: {type(target).__name__}")

        self._log(user, action, target, decision)
        return decision

    async def require(self, user: User, action: str, target: Any = None) -> None:
        """Authorize or raise.

        Raises:
            LastAdminProtectedError: If the action would remove the last admin
            AccessDeniedError: For any other denial
        """
        decision = await self.authorize(user, action, target)
        if decision.allowed:
            return

        details = {"action": action}
        if decision.reason is DenyReason.LAST_ADMIN_PROTECTED:
            raise LastAdminProtectedError(details=details)
        raise AccessDeniedError(
            decision.message,
            error_code=decision.reason.value,
            details=details,
        )

    async def _authorize_global(self, user: User, action: str) -> Decision:
        if await self.resolver.has_permission(user, action):
            return Decision.allow()
        return Decision.deny(DenyReason.MISSING_PERMISSION)

    async def _authorize_device(self, user: User, action: str, device: Device) -> Decision:
        # A global grant covers every device
        if await self.resolver.has_permission(user, action):
            return Decision.allow()
        if await self.ledger.has_capability(device, user, action):
            return Decision.allow()
        return Decision.deny(DenyReason.MISSING_PERMISSION)

    async def _authorize_owned(
        self, user: User, action: str, resource: OwnedResource
    ) -> Decision:
        if resource.owner_id == user.id:
            return Decision.allow()
        if await self.resolver.has_permission(user, action):
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER_OR_PERMISSION)

    async def _authorize_user_target(
        self, user: User, action: str, target: User
    ) -> Decision:
        if action == USER_DELETE_ACTION and await self._is_last_admin(target):
            return Decision.deny(DenyReason.LAST_ADMIN_PROTECTED)
        return await self._authorize_global(user, action)

    async def _is_last_admin(self, target: User) -> bool:
        admin_role = settings.admin_role_slug
        holds_admin = await self.session.scalar(
            select(func.count())
            .select_from(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .where(Role.slug == admin_role, UserRole.user_id == target.id)
        )
        if not holds_admin:
            return False

        admins = await self.session.scalar(
            select(func.count(func.distinct(UserRole.user_id)))
            .select_from(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .where(Role.slug == admin_role)
        )
        return (admins or 0) <= 1

    def _log(self, user: User, action: str, target: Any, decision: Decision) -> None:
        fields: dict[str, Any] = {"user_id": str(user.id), "action": action}
        if target is not None:
            fields["target_type"] = type(target).__name__
            target_id = getattr(target, "id", None)
            if target_id is not None:
                fields["target_id"] = str(target_id)

        if decision.allowed:
            logger.debug("access_allowed", **fields)
        else:
            logger.info("access_denied", reason=decision.reason.value, **fields)
