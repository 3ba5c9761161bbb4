"""Pydantic schemas for device sharing."""

from uuid import UUID

from pydantic import BaseModel, Field

from cradle_access.modules.devices.models import RelationshipType
from cradle_access.modules.users.schemas import UserSummary


class DeviceUserAssign(BaseModel):
    """Schema for sharing a device with a user.

    Omitting ``permissions`` grants the default capabilities of the
    relationship type.
    """

    relationship_type: str = Field(
        ...,
        description=f"One of: {', '.join(RelationshipType.values())}",
    )
    permissions: list[str] | None = None


class DeviceUserResponse(BaseModel):
    """Schema for one user's relationship to a device."""

    device_id: UUID
    user: UserSummary
    relationship_type: str
    permissions: list[str]


class DeviceUserListResponse(BaseModel):
    """Schema for listing the users a device is shared with."""

    device_id: UUID
    owner_id: UUID | None
    items: list[DeviceUserResponse]
