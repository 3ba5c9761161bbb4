"""Device repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from cradle_access.api.dependencies import DBSession
from cradle_access.core.errors import NotFoundError
from cradle_access.modules.devices.models import Device


class DeviceRepository:
    """Repository for Device database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, device: Device) -> Device:
        self.session.add(device)
        await self.session.flush()
        return device

    async def get_by_id(self, device_id: UUID) -> Device | None:
        return await self.session.get(Device, device_id)

    async def get_by_serial(self, serial_number: str) -> Device | None:
        result = await self.session.execute(
            select(Device).where(Device.serial_number == serial_number)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, device_id: UUID) -> Device:
        """Get a device by ID.

        Raises:
            NotFoundError: If the device does not exist
        """
        device = await self.get_by_id(device_id)
        if not device:
            raise NotFoundError(
                "Device not found",
                resource="device",
                resource_id=str(device_id),
            )
        return device


# Type alias for dependency injection
DeviceRepo = Annotated[DeviceRepository, Depends(DeviceRepository)]
