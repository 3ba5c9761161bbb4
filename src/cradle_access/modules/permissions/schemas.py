"""Pydantic schemas for the permission catalog and roles."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from cradle_access.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_GROUP_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)


# Lowercase dotted or underscored identifiers: "device.control", "manage_alerts"
SLUG_PATTERN = r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$"


class PermissionCreate(BaseModel):
    """Schema for registering a permission."""

    slug: str = Field(..., max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    group: str | None = Field(None, max_length=MAX_GROUP_LENGTH)
    parent_slug: str | None = None


class PermissionResponse(BaseModel):
    """Schema for permission response data."""

    id: UUID
    slug: str
    name: str
    description: str | None = None
    group: str | None = None
    is_system: bool

    model_config = ConfigDict(from_attributes=True)


class PermissionListResponse(BaseModel):
    """Schema for listing permissions."""

    items: list[PermissionResponse]
    total: int


class RoleCreate(BaseModel):
    """Schema for creating a role."""

    slug: str = Field(..., max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class RoleResponse(BaseModel):
    """Schema for role response data."""

    id: UUID
    slug: str
    name: str
    description: str | None = None
    permissions: list[str]


class RoleToggleResponse(BaseModel):
    """Schema for the result of toggling a role permission."""

    role: str
    permission: str
    granted: bool
