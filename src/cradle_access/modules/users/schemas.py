"""Pydantic schemas for user access reports."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class UserSummary(BaseModel):
    """Schema for embedding a user in other responses."""

    id: UUID
    email: EmailStr
    full_name: str

    model_config = ConfigDict(from_attributes=True)


class DeviceAccess(BaseModel):
    """A user's relationship to one device."""

    device_id: UUID
    device_name: str
    relationship_type: str
    permissions: list[str]


class UserAccessResponse(BaseModel):
    """Schema for a user's effective access.

    ``permissions`` is the union of every role's permissions and the
    user's direct grants; ``direct_permissions`` lists the latter alone.
    """

    user: UserSummary
    status: str
    roles: list[str]
    permissions: list[str]
    direct_permissions: list[str]
    devices: list[DeviceAccess]
