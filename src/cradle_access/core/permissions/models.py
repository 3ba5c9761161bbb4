"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: A registered capability slug (e.g. "device.control")
- Role: A named set of permissions (admin, parent, babysitter)
- UserRole: Junction table linking users to roles
- user_permissions: Junction table for permissions granted directly to users
"""

from uuid import UUID

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cradle_access.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_GROUP_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)
from cradle_access.core.database.base import Base, TimestampMixin, UUIDMixin


# Junction table for Role <-> Permission; the composite key keeps pairs unique
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

# Junction table for permissions granted to a user outside of any role
user_permissions = Table(
    "user_permissions",
    Base.metadata,
    Column(
        "user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)


class Permission(Base, UUIDMixin, TimestampMixin):
    """A registered permission.

    Attributes:
        slug: Globally unique identifier checked by the application
            (e.g. "device.control", "manage_alerts")
        name: Display name
        description: Human-readable description
        group: Optional grouping tag (e.g. "device", "user")
        parent_id: Optional parent permission, for grouping only; a grant
            of the parent never implies its children
        is_system: System permissions cannot be deleted
        position: Registration order, used for stable listings
    """

    __tablename__ = "permissions"

    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    group: Mapped[str | None] = mapped_column(
        String(MAX_GROUP_LENGTH),
        nullable=True,
        index=True,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("permissions.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_system: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Permission({self.slug})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Attributes:
        slug: Unique identifier (e.g. "admin", "parent", "babysitter")
        name: Display name
        description: Human-readable description of the role
    """

    __tablename__ = "roles"

    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    # Relationships
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        lazy="selectin",
    )

    def has_permission(self, slug: str) -> bool:
        """Check the loaded permission collection for a slug."""
        return any(permission.slug == slug for permission in self.permissions)

    def __repr__(self) -> str:
        return f"<Role(slug={self.slug})>"


class UserRole(Base, TimestampMixin):
    """Junction table linking users to roles.

    A user can hold several roles; their effective permissions are the
    union of all their roles' permissions plus direct grants.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
