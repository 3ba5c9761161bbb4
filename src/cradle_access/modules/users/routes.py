"""User access API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from cradle_access.api.dependencies import AccessEngine, Ledger
from cradle_access.core.auth.dependencies import CurrentUser
from cradle_access.core.permissions.decorators import require_permission
from cradle_access.modules.users.schemas import (
    DeviceAccess,
    UserAccessResponse,
    UserSummary,
)
from cradle_access.modules.users.services import UserAccessSvc


router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/{user_id}/access",
    response_model=UserAccessResponse,
    summary="Get a user's effective access",
    description="Roles, effective permissions and device relationships of a user.",
)
@require_permission("user.view")
async def get_user_access(
    user_id: UUID,
    service: UserAccessSvc,
    ledger: Ledger,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,
) -> UserAccessResponse:
    """Report what a user may do."""
    user = await service.get_user(user_id)
    permissions = await access.resolver.effective_permissions(user)
    links = await ledger.relationships_for_user(user)

    return UserAccessResponse(
        user=UserSummary.model_validate(user),
        status=user.status,
        roles=sorted(role.slug for role in user.roles),
        permissions=sorted(permissions),
        direct_permissions=sorted(p.slug for p in user.direct_permissions),
        devices=[
            DeviceAccess(
                device_id=link.device_id,
                device_name=link.device.name,
                relationship_type=link.relationship_type,
                permissions=list(link.permissions),
            )
            for link in links
        ],
    )


@router.put(
    "/{user_id}/roles/{role_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Assign a role",
)
@require_permission("user.update")
async def assign_role(
    user_id: UUID,
    role_slug: str,
    service: UserAccessSvc,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> None:
    """Give a user a role."""
    user = await service.get_user(user_id)
    await service.assign_role(user, role_slug)


@router.delete(
    "/{user_id}/roles/{role_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a role",
)
@require_permission("user.update")
async def remove_role(
    user_id: UUID,
    role_slug: str,
    service: UserAccessSvc,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> None:
    """Take a role from a user."""
    user = await service.get_user(user_id)
    await service.remove_role(user, role_slug)


@router.put(
    "/{user_id}/permissions/{permission_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Grant a direct permission",
)
@require_permission("user.update")
async def grant_permission(
    user_id: UUID,
    permission_slug: str,
    service: UserAccessSvc,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> None:
    """Grant a permission to a user outside any role."""
    user = await service.get_user(user_id)
    await service.grant_permission(user, permission_slug)


@router.delete(
    "/{user_id}/permissions/{permission_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke a direct permission",
)
@require_permission("user.update")
async def revoke_permission(
    user_id: UUID,
    permission_slug: str,
    service: UserAccessSvc,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> None:
    """Revoke a user's direct permission."""
    user = await service.get_user(user_id)
    await service.revoke_permission(user, permission_slug)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    description="Requires user.delete. The last administrator cannot be deleted.",
)
async def delete_user(
    user_id: UUID,
    service: UserAccessSvc,
    current_user: CurrentUser,
) -> None:
    """Delete a user."""
    user = await service.get_user(user_id)
    await service.delete_user(current_user, user)
