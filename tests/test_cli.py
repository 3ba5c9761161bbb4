"""Tests for cradle-access CLI commands."""

import asyncio
from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from typer.testing import CliRunner

from cradle_access import __version__
from cradle_access.cli import app
from cradle_access.config import settings
from cradle_access.core.database import Base
from cradle_access.core.permissions.catalog import DEFAULT_PERMISSIONS, seed_defaults
from cradle_access.core.permissions.models import Permission, UserRole
from cradle_access.core.permissions.roles import RoleStore
from cradle_access.modules.devices.ledger import DeviceRelationshipLedger
from cradle_access.modules.devices.models import Device
from cradle_access.modules.users.models import User


runner = CliRunner()


@pytest.fixture
def session_factory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Point the CLI at a fresh SQLite database file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}",
        poolclass=NullPool,
    )

    async def _create_schema() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_schema())

    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    monkeypatch.setattr("cradle_access.commands.get_session_factory", lambda: factory)

    yield factory

    asyncio.run(engine.dispose())


@pytest.fixture
def empty_database(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Point the CLI at a SQLite database file with no tables."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}"
    engine = create_async_engine(url, poolclass=NullPool)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    monkeypatch.setattr(settings, "database_url", url)
    monkeypatch.setattr("cradle_access.commands.get_session_factory", lambda: factory)

    yield factory

    asyncio.run(engine.dispose())


def _run(factory: async_sessionmaker[AsyncSession], work):
    """Run a coroutine function against a committed session."""

    async def _inner():
        async with factory() as session:
            result = await work(session)
            await session.commit()
            return result

    return asyncio.run(_inner())


class TestVersion:
    """Tests for the --version option."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestPermissionsCommands:
    """Tests for cradle-access permissions."""

    def test_seed_creates_defaults(self, session_factory) -> None:
        """Verify seed creates the catalog."""
        result = runner.invoke(app, ["permissions", "seed"])

        assert result.exit_code == 0, result.stdout
        assert f"Permissions created: {len(DEFAULT_PERMISSIONS)}" in result.stdout

        async def _count(session: AsyncSession) -> int:
            return len((await session.execute(select(Permission))).scalars().all())

        assert _run(session_factory, _count) == len(DEFAULT_PERMISSIONS)

    def test_seed_twice_creates_nothing(self, session_factory) -> None:
        runner.invoke(app, ["permissions", "seed"])

        result = runner.invoke(app, ["permissions", "seed"])

        assert result.exit_code == 0
        assert "Permissions created: 0" in result.stdout
        assert "Grants added:        0" in result.stdout

    def test_list_empty_catalog(self, session_factory) -> None:
        result = runner.invoke(app, ["permissions", "list"])

        assert result.exit_code == 0
        assert "no permissions registered" in result.stdout.lower()

    def test_list_by_group(self, session_factory) -> None:
        """Verify list shows slugs and the roles holding them."""
        _run(session_factory, seed_defaults)

        result = runner.invoke(app, ["permissions", "list", "--group", "user"])

        assert result.exit_code == 0
        assert "user.delete" in result.stdout
        assert "admin" in result.stdout
        assert "device.control" not in result.stdout


class TestUsersCommands:
    """Tests for cradle-access users."""

    def test_check_unknown_user(self, session_factory) -> None:
        result = runner.invoke(app, ["users", "check", "nobody@example.com"])

        assert result.exit_code == 1
        assert "not found" in result.stdout.lower()

    def test_check_reports_access(self, session_factory) -> None:
        async def _setup(session: AsyncSession) -> None:
            await seed_defaults(session)
            parent = await RoleStore(session).get_role("parent")
            user = User(
                email="parent@example.com",
                full_name="Pat Parent",
                roles=[parent],
                direct_permissions=[],
            )
            device = Device(name="Nursery", serial_number="CR-0001")
            session.add_all([user, device])
            await session.flush()
            await DeviceRelationshipLedger(session).assign(device, user, "owner")

        _run(session_factory, _setup)

        result = runner.invoke(app, ["users", "check", "parent@example.com"])

        assert result.exit_code == 0, result.stdout
        assert "Pat Parent" in result.stdout
        assert "monitoring.control: ✓" in result.stdout
        assert "Nursery" in result.stdout
        assert "owner" in result.stdout

    def test_check_user_without_devices(self, session_factory) -> None:
        async def _setup(session: AsyncSession) -> None:
            session.add(
                User(
                    email="lonely@example.com",
                    full_name="Lonely",
                    roles=[],
                    direct_permissions=[],
                )
            )

        _run(session_factory, _setup)

        result = runner.invoke(app, ["users", "check", "lonely@example.com"])

        assert result.exit_code == 0
        assert "monitoring.view: ✗" in result.stdout
        assert "No devices assigned" in result.stdout


class TestRolesCommands:
    """Tests for cradle-access roles."""

    def test_collapse_keeps_highest_priority_role(self, session_factory) -> None:
        async def _setup(session: AsyncSession) -> None:
            await seed_defaults(session)
            store = RoleStore(session)
            session.add(
                User(
                    email="both@example.com",
                    full_name="Both Roles",
                    roles=[
                        await store.get_role("babysitter"),
                        await store.get_role("parent"),
                    ],
                    direct_permissions=[],
                )
            )

        _run(session_factory, _setup)

        result = runner.invoke(app, ["roles", "collapse", "--force"])

        assert result.exit_code == 0, result.stdout
        assert "kept parent" in result.stdout
        assert "Collapsed roles for 1 user(s)" in result.stdout

        async def _remaining(session: AsyncSession) -> int:
            return len((await session.execute(select(UserRole))).scalars().all())

        assert _run(session_factory, _remaining) == 1

    def test_collapse_with_nothing_to_do(self, session_factory) -> None:
        result = runner.invoke(app, ["roles", "collapse", "--force"])

        assert result.exit_code == 0
        assert "No users hold more than one role" in result.stdout

    def test_collapse_cancelled(self, session_factory) -> None:
        result = runner.invoke(app, ["roles", "collapse"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.stdout


def _schema_objects(factory: async_sessionmaker[AsyncSession], kind: str) -> set[str]:
    async def _names(session: AsyncSession) -> set[str]:
        result = await session.execute(
            text("SELECT name FROM sqlite_master WHERE type = :kind"), {"kind": kind}
        )
        return set(result.scalars().all())

    return _run(factory, _names)


class TestDbCommands:
    """Tests for cradle-access db."""

    def test_upgrade_creates_schema(self, empty_database) -> None:
        result = runner.invoke(app, ["db", "upgrade"])

        assert result.exit_code == 0, result.stdout
        assert "Database upgraded to head" in result.stdout
        assert {
            "permissions",
            "roles",
            "role_permissions",
            "users",
            "user_roles",
            "user_permissions",
            "devices",
            "device_user",
        } <= _schema_objects(empty_database, "table")
        assert "uq_device_user_single_owner" in _schema_objects(empty_database, "index")

    def test_seed_after_upgrade(self, empty_database) -> None:
        """A freshly migrated database can be seeded."""
        runner.invoke(app, ["db", "upgrade"])

        result = runner.invoke(app, ["permissions", "seed"])

        assert result.exit_code == 0, result.stdout
        assert f"Permissions created: {len(DEFAULT_PERMISSIONS)}" in result.stdout

    def test_migrated_schema_allows_one_owner(self, empty_database) -> None:
        runner.invoke(app, ["db", "upgrade"])

        async def _assign(session: AsyncSession) -> None:
            device = Device(name="Nursery", serial_number="CR-0002")
            first, second = (
                User(email=email, full_name="Owner", roles=[], direct_permissions=[])
                for email in ("a@example.com", "b@example.com")
            )
            session.add_all([device, first, second])
            await session.flush()
            ledger = DeviceRelationshipLedger(session)
            await ledger.assign(device, first, "owner")
            await ledger.assign(device, second, "owner")

        _run(empty_database, _assign)

        async def _owners(session: AsyncSession) -> list[str]:
            result = await session.execute(
                text("SELECT relationship_type FROM device_user")
            )
            return list(result.scalars().all())

        assert _run(empty_database, _owners) == ["owner"]

    def test_downgrade_to_base_drops_schema(self, empty_database) -> None:
        runner.invoke(app, ["db", "upgrade"])

        result = runner.invoke(app, ["db", "downgrade", "base", "--force"])

        assert result.exit_code == 0, result.stdout
        assert "permissions" not in _schema_objects(empty_database, "table")
