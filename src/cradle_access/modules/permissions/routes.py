"""Permission catalog and role administration API routes."""

from fastapi import APIRouter, Query, status

from cradle_access.api.dependencies import AccessEngine, Registry, Roles
from cradle_access.core.auth.dependencies import CurrentUser
from cradle_access.core.permissions.decorators import require_permission
from cradle_access.core.permissions.models import Role
from cradle_access.modules.permissions.schemas import (
    PermissionCreate,
    PermissionListResponse,
    PermissionResponse,
    RoleCreate,
    RoleResponse,
    RoleToggleResponse,
)


permissions_router = APIRouter(prefix="/permissions", tags=["permissions"])
roles_router = APIRouter(prefix="/roles", tags=["roles"])


def _role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        slug=role.slug,
        name=role.name,
        description=role.description,
        permissions=[permission.slug for permission in role.permissions],
    )


# ============================================================
# Permission Catalog
# ============================================================


@permissions_router.get(
    "",
    response_model=PermissionListResponse,
    summary="List permissions",
    description="The permission catalog in registration order, optionally for one group.",
)
@require_permission("role.view")
async def list_permissions(
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
    group: str | None = Query(None, description="Only permissions of this group"),
) -> PermissionListResponse:
    """List registered permissions."""
    if group is not None:
        permissions = await registry.list_by_group(group)
    else:
        permissions = await registry.list_all()

    return PermissionListResponse(
        items=[PermissionResponse.model_validate(p) for p in permissions],
        total=len(permissions),
    )


@permissions_router.post(
    "",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a permission",
)
@require_permission("role.create")
async def create_permission(
    data: PermissionCreate,
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> PermissionResponse:
    """Register a new permission slug."""
    permission = await registry.register(
        slug=data.slug,
        name=data.name,
        description=data.description,
        group=data.group,
        parent_slug=data.parent_slug,
    )
    return PermissionResponse.model_validate(permission)


@permissions_router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a permission",
    description="System permissions and permissions still granted cannot be deleted.",
)
@require_permission("role.delete")
async def delete_permission(
    slug: str,
    registry: Registry,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> None:
    """Delete a permission."""
    await registry.delete(slug)


# ============================================================
# Roles
# ============================================================


@roles_router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
@require_permission("role.create")
async def create_role(
    data: RoleCreate,
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> RoleResponse:
    """Create a role with no permissions."""
    role = await roles.create_role(data.slug, data.name, data.description)
    return _role_response(role)


@roles_router.put(
    "/{slug}/permissions/{permission_slug}",
    response_model=RoleResponse,
    summary="Grant a permission to a role",
)
@require_permission("role.update")
async def grant_role_permission(
    slug: str,
    permission_slug: str,
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> RoleResponse:
    """Grant a permission; granting twice is a no-op."""
    role = await roles.get_role(slug)
    await roles.grant(role, permission_slug)
    return _role_response(role)


@roles_router.delete(
    "/{slug}/permissions/{permission_slug}",
    response_model=RoleResponse,
    summary="Revoke a permission from a role",
)
@require_permission("role.update")
async def revoke_role_permission(
    slug: str,
    permission_slug: str,
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> RoleResponse:
    """Revoke a permission; revoking an absent grant is a no-op."""
    role = await roles.get_role(slug)
    await roles.revoke(role, permission_slug)
    return _role_response(role)


@roles_router.post(
    "/{slug}/permissions/{permission_slug}/toggle",
    response_model=RoleToggleResponse,
    summary="Toggle a role permission",
)
@require_permission("role.update")
async def toggle_role_permission(
    slug: str,
    permission_slug: str,
    roles: Roles,
    current_user: CurrentUser,  # noqa: ARG001
    access: AccessEngine,  # noqa: ARG001
) -> RoleToggleResponse:
    """Flip a permission on a role."""
    role = await roles.get_role(slug)
    granted = await roles.toggle(role, permission_slug)
    return RoleToggleResponse(role=slug, permission=permission_slug, granted=granted)


router = APIRouter()
router.include_router(permissions_router)
router.include_router(roles_router)
