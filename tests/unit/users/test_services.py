"""Unit tests for the user access service."""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.errors import (
    AccessDeniedError,
    LastAdminProtectedError,
    NotFoundError,
    UnknownPermissionError,
)
from cradle_access.core.permissions.engine import AccessDecisionEngine
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.roles import RoleStore
from cradle_access.modules.devices.ledger import DeviceRelationshipLedger
from cradle_access.modules.devices.models import Device
from cradle_access.modules.users.repos import UserRepository
from cradle_access.modules.users.services import UserAccessService


pytestmark = pytest.mark.unit


@pytest.fixture
def service(
    db: AsyncSession,
    registry: PermissionRegistry,
    roles: RoleStore,
    access: AccessDecisionEngine,
) -> UserAccessService:
    return UserAccessService(UserRepository(db), registry, roles, access)


@pytest.mark.usefixtures("seeded")
class TestRoleMembership:
    """Tests for assign_role, remove_role and set_role."""

    async def test_assign_role_grants_its_permissions(
        self, service: UserAccessService, access: AccessDecisionEngine, make_user
    ):
        user = await make_user()
        assert not await access.resolver.has_permission(user, "device.control")

        await service.assign_role(user, "parent")

        assert user.has_role("parent")
        assert await access.resolver.has_permission(user, "device.control")

    async def test_assign_role_twice_is_noop(self, service: UserAccessService, make_user):
        user = await make_user()

        await service.assign_role(user, "parent")
        await service.assign_role(user, "parent")

        assert [role.slug for role in user.roles] == ["parent"]

    async def test_assign_unknown_role_fails(self, service: UserAccessService, make_user):
        user = await make_user()

        with pytest.raises(NotFoundError):
            await service.assign_role(user, "grandparent")

    async def test_remove_role(
        self, service: UserAccessService, access: AccessDecisionEngine, make_user
    ):
        user = await make_user("parent", "babysitter")
        assert await access.resolver.has_permission(user, "device.control")

        await service.remove_role(user, "parent")

        assert [role.slug for role in user.roles] == ["babysitter"]
        assert not await access.resolver.has_permission(user, "device.control")

    async def test_set_role_replaces_all_roles(
        self, service: UserAccessService, make_user
    ):
        user = await make_user("parent", "babysitter")

        await service.set_role(user, "admin")

        assert [role.slug for role in user.roles] == ["admin"]


@pytest.mark.usefixtures("seeded")
class TestDirectPermissions:
    """Tests for grant_permission and revoke_permission."""

    async def test_grant_direct_permission(
        self, service: UserAccessService, access: AccessDecisionEngine, make_user
    ):
        user = await make_user("babysitter")

        await service.grant_permission(user, "device.control")

        assert await access.resolver.has_permission(user, "device.control")

    async def test_grant_unknown_permission_fails(
        self, service: UserAccessService, make_user
    ):
        user = await make_user()

        with pytest.raises(UnknownPermissionError):
            await service.grant_permission(user, "device.teleport")

    async def test_revoke_direct_keeps_role_grant(
        self, service: UserAccessService, access: AccessDecisionEngine, make_user
    ):
        """A permission held both ways survives losing the direct grant."""
        user = await make_user("parent")
        await service.grant_permission(user, "device.control")

        await service.revoke_permission(user, "device.control")

        assert user.direct_permissions == []
        assert await access.resolver.has_permission(user, "device.control")

    async def test_revoke_absent_permission_is_noop(
        self, service: UserAccessService, make_user
    ):
        user = await make_user()

        await service.revoke_permission(user, "device.control")

        assert user.direct_permissions == []


class TestDeleteUser:
    """Tests for delete_user."""

    async def test_admin_deletes_user_and_relationships(
        self,
        service: UserAccessService,
        ledger: DeviceRelationshipLedger,
        device: Device,
        admin,
        babysitter,
    ):
        await ledger.assign(device, babysitter, "babysitter")

        await service.delete_user(admin, babysitter)

        assert await service.repo.get_by_id(babysitter.id) is None
        assert await ledger.relationships_for_device(device) == []

    async def test_last_admin_cannot_be_deleted(
        self, service: UserAccessService, admin
    ):
        with pytest.raises(LastAdminProtectedError):
            await service.delete_user(admin, admin)

        assert await service.repo.get_by_id(admin.id) is admin

    async def test_parent_cannot_delete_users(
        self, service: UserAccessService, parent, babysitter
    ):
        with pytest.raises(AccessDeniedError):
            await service.delete_user(parent, babysitter)

    async def test_get_unknown_user_fails(self, service: UserAccessService, seeded):
        with pytest.raises(NotFoundError):
            await service.get_user(uuid4())
