"""User database models."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cradle_access.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_STATUS_LENGTH,
    USER_STATUS_ACTIVE,
)
from cradle_access.core.database.base import Base, TimestampMixin, UUIDMixin
from cradle_access.core.permissions.models import Permission, Role, user_permissions


class User(Base, UUIDMixin, TimestampMixin):
    """An application user (admin, parent or babysitter).

    Authentication happens upstream; this model carries only what the
    authorization core needs.

    Attributes:
        email: Unique email address
        full_name: User's full name
        status: "active" or "inactive"; inactive users are refused by the
            API layer before any permission is evaluated
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    full_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default=USER_STATUS_ACTIVE,
        nullable=False,
    )

    # Relationships
    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary="user_roles",
        lazy="selectin",
    )
    direct_permissions: Mapped[list[Permission]] = relationship(
        Permission,
        secondary=user_permissions,
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return self.status == USER_STATUS_ACTIVE

    def has_role(self, slug: str) -> bool:
        """Check the loaded role collection for a role slug."""
        return any(role.slug == slug for role in self.roles)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
