"""Unit tests for role maintenance and default seeding."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.permissions.catalog import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    ROLE_GRANTS,
    seed_defaults,
)
from cradle_access.core.permissions.maintenance import (
    collapse_to_primary_role,
    pick_primary_role,
)
from cradle_access.core.permissions.models import Permission, UserRole
from cradle_access.core.permissions.roles import RoleStore


pytestmark = pytest.mark.unit


class TestPickPrimaryRole:
    """Tests for pick_primary_role."""

    def test_highest_priority_wins(self):
        priority = ["admin", "parent", "babysitter"]

        assert pick_primary_role(["babysitter", "parent"], priority) == "parent"
        assert pick_primary_role(["parent", "admin"], priority) == "admin"

    def test_unlisted_roles_rank_last(self):
        assert pick_primary_role(["custom", "babysitter"], ["admin", "babysitter"]) == (
            "babysitter"
        )

    def test_ties_keep_first(self):
        assert pick_primary_role(["custom", "other"], ["admin"]) == "custom"


class TestCollapseToPrimaryRole:
    """Tests for collapse_to_primary_role."""

    async def test_multi_role_users_keep_one_role(
        self, db: AsyncSession, seeded, make_user
    ):
        user = await make_user("babysitter", "parent")

        repaired = await collapse_to_primary_role(db)

        assert repaired == {user.id: "parent"}
        remaining = await db.scalar(
            select(func.count()).select_from(UserRole).where(UserRole.user_id == user.id)
        )
        assert remaining == 1

    async def test_single_role_users_are_untouched(
        self, db: AsyncSession, seeded, make_user
    ):
        await make_user("babysitter")

        assert await collapse_to_primary_role(db) == {}

    async def test_custom_priority(self, db: AsyncSession, seeded, make_user):
        user = await make_user("admin", "parent")

        repaired = await collapse_to_primary_role(db, ["parent", "admin"])

        assert repaired == {user.id: "parent"}


class TestSeedDefaults:
    """Tests for seed_defaults."""

    async def test_seed_creates_catalog_and_roles(self, db: AsyncSession):
        counts = await seed_defaults(db)

        assert counts["permissions"] == len(DEFAULT_PERMISSIONS)
        assert counts["roles"] == len(DEFAULT_ROLES)
        assert counts["grants"] == sum(len(slugs) for slugs in ROLE_GRANTS.values())

        babysitter = await RoleStore(db).get_role("babysitter")
        assert {p.slug for p in babysitter.permissions} == set(ROLE_GRANTS["babysitter"])

    async def test_seeded_permissions_are_system(self, db: AsyncSession):
        await seed_defaults(db)

        non_system = await db.scalar(
            select(func.count()).select_from(Permission).where(Permission.is_system.is_(False))
        )
        assert non_system == 0

    async def test_seed_is_idempotent(self, db: AsyncSession):
        await seed_defaults(db)

        counts = await seed_defaults(db)

        assert counts == {"permissions": 0, "roles": 0, "grants": 0}

    async def test_admin_holds_every_default_permission(self, db: AsyncSession):
        await seed_defaults(db)

        admin = await RoleStore(db).get_role("admin")
        assert len(admin.permissions) == len(DEFAULT_PERMISSIONS)
