"""Device relationship ledger.

Records how each user relates to each device and which capabilities that
relationship grants on that device. These scoped grants are independent of
roles: a global "device.control" does not appear in a device subset, and a
subset entry authorizes its device only.
"""

from collections.abc import Iterable
from typing import NamedTuple

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.errors import InvalidRelationshipTypeError
from cradle_access.modules.devices.models import Device, DeviceUser, RelationshipType
from cradle_access.modules.users.models import User


logger = structlog.get_logger()


# Capabilities granted when a relationship is assigned without an explicit subset
DEFAULT_CAPABILITIES: dict[RelationshipType, tuple[str, ...]] = {
    RelationshipType.OWNER: (
        "device.view",
        "device.control",
        "device.monitor",
        "device.health",
        "device.update",
        "device.manage_users",
    ),
    RelationshipType.CARETAKER: (
        "device.view",
        "device.control",
        "device.monitor",
        "device.health",
    ),
    RelationshipType.VIEWER: ("device.view", "device.monitor"),
    RelationshipType.BABYSITTER: ("device.view", "device.monitor", "device.health"),
}


class DeviceRelationship(NamedTuple):
    """A user's relationship to one device."""

    relationship_type: RelationshipType
    permissions: frozenset[str]


def parse_relationship_type(value: str | RelationshipType) -> RelationshipType:
    """Validate a relationship type.

    Raises:
        InvalidRelationshipTypeError: If the value is not a known type
    """
    try:
        return RelationshipType(value)
    except ValueError:
        raise InvalidRelationshipTypeError(
            str(value), RelationshipType.values()
        ) from None


class DeviceRelationshipLedger:
    """Service for device-scoped relationships and capabilities."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def assign(
        self,
        device: Device,
        user: User,
        relationship_type: str | RelationshipType,
        permission_subset: Iterable[str] | None = None,
    ) -> DeviceUser:
        """Create or replace the relationship between a user and a device.

        Assigning an owner removes the previous owner's relationship in the
        same flush, so the device never has zero or two owners once this
        returns. The whole request transaction rolls back on failure.

        Args:
            device: The device
            user: The user being assigned
            relationship_type: owner, caretaker, viewer or babysitter
            permission_subset: Device-scoped capabilities; defaults to
                DEFAULT_CAPABILITIES for the type

        Returns:
            The stored relationship

        Raises:
            InvalidRelationshipTypeError: If the type is not recognised
        """
        rel_type = parse_relationship_type(relationship_type)
        if permission_subset is None:
            permission_subset = DEFAULT_CAPABILITIES[rel_type]
        # Deduplicated, order kept for display
        capabilities = list(dict.fromkeys(permission_subset))

        if rel_type is RelationshipType.OWNER:
            previous = await self.owner(device)
            if previous is not None and previous.id != user.id:
                await self.session.execute(
                    delete(DeviceUser).where(
                        DeviceUser.device_id == device.id,
                        DeviceUser.user_id == previous.id,
                    )
                )
                logger.info(
                    "device_owner_replaced",
                    device_id=str(device.id),
                    previous_owner_id=str(previous.id),
                    owner_id=str(user.id),
                )

        link = await self._get_link(device, user)
        if link is None:
            link = DeviceUser(
                device=device,
                user=user,
                relationship_type=rel_type.value,
                permissions=capabilities,
            )
            self.session.add(link)
        else:
            link.relationship_type = rel_type.value
            link.permissions = capabilities

        await self.session.flush()
        logger.info(
            "device_user_assigned",
            device_id=str(device.id),
            user_id=str(user.id),
            relationship_type=rel_type.value,
        )
        return link

    async def unassign(self, device: Device, user: User) -> None:
        """Remove a user's relationship to a device, if any."""
        result = await self.session.execute(
            delete(DeviceUser).where(
                DeviceUser.device_id == device.id,
                DeviceUser.user_id == user.id,
            )
        )
        if result.rowcount:
            logger.info(
                "device_user_removed",
                device_id=str(device.id),
                user_id=str(user.id),
            )

    async def relationship_of(
        self, device: Device, user: User
    ) -> DeviceRelationship | None:
        link = await self._get_link(device, user)
        if link is None:
            return None
        return DeviceRelationship(
            relationship_type=RelationshipType(link.relationship_type),
            permissions=frozenset(link.permissions or ()),
        )

    async def has_capability(self, device: Device, user: User, capability: str) -> bool:
        """Check for a device-scoped capability. Never raises."""
        relationship = await self.relationship_of(device, user)
        return relationship is not None and capability in relationship.permissions

    async def owner(self, device: Device) -> User | None:
        result = await self.session.execute(
            select(User)
            .join(DeviceUser, DeviceUser.user_id == User.id)
            .where(
                DeviceUser.device_id == device.id,
                DeviceUser.relationship_type == RelationshipType.OWNER.value,
            )
        )
        return result.scalar_one_or_none()

    async def users_with_type(
        self, device: Device, relationship_type: str | RelationshipType
    ) -> list[User]:
        """List the users holding a relationship type on a device.

        Raises:
            InvalidRelationshipTypeError: If the type is not recognised
        """
        rel_type = parse_relationship_type(relationship_type)
        result = await self.session.execute(
            select(User)
            .join(DeviceUser, DeviceUser.user_id == User.id)
            .where(
                DeviceUser.device_id == device.id,
                DeviceUser.relationship_type == rel_type.value,
            )
            .order_by(User.email)
        )
        return list(result.scalars().all())

    async def relationships_for_device(self, device: Device) -> list[DeviceUser]:
        result = await self.session.execute(
            select(DeviceUser).where(DeviceUser.device_id == device.id)
        )
        return list(result.scalars().all())

    async def relationships_for_user(self, user: User) -> list[DeviceUser]:
        result = await self.session.execute(
            select(DeviceUser).where(DeviceUser.user_id == user.id)
        )
        return list(result.scalars().all())

    async def _get_link(self, device: Device, user: User) -> DeviceUser | None:
        return await self.session.get(DeviceUser, (device.id, user.id))
