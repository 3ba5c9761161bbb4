"""Device database models.

A device (smart cradle) is shared with users through ``DeviceUser`` rows,
each carrying a relationship type and the capabilities that user holds
on that device only.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cradle_access.core.constants import (
    MAX_NAME_LENGTH,
    MAX_RELATIONSHIP_TYPE_LENGTH,
    MAX_SERIAL_LENGTH,
    MAX_STATUS_LENGTH,
)
from cradle_access.core.database.base import Base, TimestampMixin, UUIDMixin
from cradle_access.modules.users.models import User


class RelationshipType(str, Enum):
    """How a user is associated with a device."""

    OWNER = "owner"
    CARETAKER = "caretaker"
    VIEWER = "viewer"
    BABYSITTER = "babysitter"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


_OWNER_ONLY = text("relationship_type = 'owner'")


class Device(Base, UUIDMixin, TimestampMixin):
    """A connected cradle.

    Attributes:
        name: Display name
        serial_number: Unique hardware serial number
        status: Last reported connectivity status (online, offline, maintenance)
    """

    __tablename__ = "devices"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    serial_number: Mapped[str] = mapped_column(
        String(MAX_SERIAL_LENGTH),
        nullable=False,
        unique=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default="offline",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Device(id={self.id}, serial_number={self.serial_number})>"


class DeviceUser(Base, TimestampMixin):
    """Relationship between a user and a device.

    The composite key allows one relationship per (device, user) pair and
    the partial unique index allows one owner per device.

    Attributes:
        relationship_type: One of RelationshipType
        permissions: Capabilities granted on this device only
    """

    __tablename__ = "device_user"
    __table_args__ = (
        Index(
            "uq_device_user_single_owner",
            "device_id",
            unique=True,
            sqlite_where=_OWNER_ONLY,
            postgresql_where=_OWNER_ONLY,
        ),
    )

    device_id: Mapped[UUID] = mapped_column(
        ForeignKey("devices.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    relationship_type: Mapped[str] = mapped_column(
        String(MAX_RELATIONSHIP_TYPE_LENGTH),
        nullable=False,
    )
    permissions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Relationships
    user: Mapped[User] = relationship(User, lazy="selectin")
    device: Mapped[Device] = relationship(Device, lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<DeviceUser(device_id={self.device_id}, user_id={self.user_id}, "
            f"type={self.relationship_type})>"
        )
