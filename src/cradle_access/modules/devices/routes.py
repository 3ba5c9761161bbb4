"""Device sharing API routes.

Access is decided per device: a global grant works on every device, and
a relationship subset works on its own device only.
"""

from uuid import UUID

from fastapi import APIRouter, status

from cradle_access.api.dependencies import AccessEngine, Ledger
from cradle_access.core.auth.dependencies import CurrentUser
from cradle_access.modules.devices.models import DeviceUser
from cradle_access.modules.devices.repos import DeviceRepo
from cradle_access.modules.devices.schemas import (
    DeviceUserAssign,
    DeviceUserListResponse,
    DeviceUserResponse,
)
from cradle_access.modules.users.repos import UserRepo
from cradle_access.modules.users.schemas import UserSummary
from cradle_access.modules.users.services import UserAccessSvc


router = APIRouter(prefix="/devices", tags=["devices"])


def _to_response(link: DeviceUser) -> DeviceUserResponse:
    return DeviceUserResponse(
        device_id=link.device_id,
        user=UserSummary.model_validate(link.user),
        relationship_type=link.relationship_type,
        permissions=list(link.permissions),
    )


@router.get(
    "/{device_id}/users",
    response_model=DeviceUserListResponse,
    summary="List device users",
    description="Users the device is shared with. Requires device.view on the device.",
)
async def list_device_users(
    device_id: UUID,
    devices: DeviceRepo,
    ledger: Ledger,
    current_user: CurrentUser,
    access: AccessEngine,
) -> DeviceUserListResponse:
    """List a device's relationships."""
    device = await devices.get_or_404(device_id)
    await access.require(current_user, "device.view", device)

    links = await ledger.relationships_for_device(device)
    owner = await ledger.owner(device)
    return DeviceUserListResponse(
        device_id=device.id,
        owner_id=owner.id if owner else None,
        items=[_to_response(link) for link in links],
    )


@router.put(
    "/{device_id}/users/{user_id}",
    response_model=DeviceUserResponse,
    summary="Share a device",
    description=(
        "Create or replace a user's relationship to the device. Assigning "
        "an owner replaces the current owner. Requires device.manage_users "
        "on the device."
    ),
)
async def assign_device_user(
    device_id: UUID,
    user_id: UUID,
    data: DeviceUserAssign,
    devices: DeviceRepo,
    service: UserAccessSvc,
    ledger: Ledger,
    current_user: CurrentUser,
    access: AccessEngine,
) -> DeviceUserResponse:
    """Assign a relationship."""
    device = await devices.get_or_404(device_id)
    await access.require(current_user, "device.manage_users", device)

    user = await service.get_user(user_id)
    link = await ledger.assign(device, user, data.relationship_type, data.permissions)
    return _to_response(link)


@router.delete(
    "/{device_id}/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Stop sharing a device",
    description="Requires device.manage_users on the device.",
)
async def unassign_device_user(
    device_id: UUID,
    user_id: UUID,
    devices: DeviceRepo,
    users: UserRepo,
    ledger: Ledger,
    current_user: CurrentUser,
    access: AccessEngine,
) -> None:
    """Remove a relationship; succeeds when none exists."""
    device = await devices.get_or_404(device_id)
    await access.require(current_user, "device.manage_users", device)

    user = await users.get_by_id(user_id)
    if user is not None:
        await ledger.unassign(device, user)
