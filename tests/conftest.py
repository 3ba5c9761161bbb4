"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from cradle_access.core.auth.backend import create_access_token
from cradle_access.core.database import Base, get_db
from cradle_access.core.permissions.catalog import seed_defaults
from cradle_access.core.permissions.engine import AccessDecisionEngine
from cradle_access.core.permissions.models import Permission, Role, UserRole  # noqa: F401
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.resolver import UserGrantResolver
from cradle_access.core.permissions.roles import RoleStore
from cradle_access.main import create_app

# Import all models to ensure they're registered with Base.metadata
from cradle_access.modules.devices.ledger import DeviceRelationshipLedger
from cradle_access.modules.devices.models import Device, DeviceUser  # noqa: F401
from cradle_access.modules.users.models import User
from tests.factories.device import DeviceFactory
from tests.factories.user import UserFactory


# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.connect() as conn:
        await conn.begin()

        async with session_factory(bind=conn) as session:
            yield session

        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Service Fixtures
# ============================================================


@pytest.fixture
def registry(db: AsyncSession) -> PermissionRegistry:
    return PermissionRegistry(db)


@pytest.fixture
def resolver(db: AsyncSession) -> UserGrantResolver:
    return UserGrantResolver(db)


@pytest.fixture
def roles(
    db: AsyncSession, registry: PermissionRegistry, resolver: UserGrantResolver
) -> RoleStore:
    return RoleStore(db, registry=registry, resolver=resolver)


@pytest.fixture
def ledger(db: AsyncSession) -> DeviceRelationshipLedger:
    return DeviceRelationshipLedger(db)


@pytest.fixture
def access(
    db: AsyncSession,
    resolver: UserGrantResolver,
    ledger: DeviceRelationshipLedger,
) -> AccessDecisionEngine:
    return AccessDecisionEngine(db, resolver=resolver, ledger=ledger)


@pytest.fixture
async def seeded(db: AsyncSession) -> dict[str, int]:
    """Seed the default catalog, roles and role grants."""
    return await seed_defaults(db)


# ============================================================
# User and Device Fixtures
# ============================================================


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Return a coroutine that persists a user holding the given roles.

    Roles must exist already (see the ``seeded`` fixture).
    """

    async def _make_user(*role_slugs: str, **overrides) -> User:
        user = UserFactory.build(**overrides)
        db.add(user)
        for slug in role_slugs:
            role = await RoleStore(db).get_role(slug)
            user.roles.append(role)
        await db.flush()
        return user

    return _make_user


@pytest.fixture
async def device(db: AsyncSession) -> Device:
    """Create a test device."""
    device = DeviceFactory.build()
    db.add(device)
    await db.flush()
    return device


@pytest.fixture
async def admin(seeded, make_user) -> User:
    return await make_user("admin", email="admin@example.com")


@pytest.fixture
async def parent(seeded, make_user) -> User:
    return await make_user("parent", email="parent@example.com")


@pytest.fixture
async def babysitter(seeded, make_user) -> User:
    return await make_user("babysitter", email="sitter@example.com")


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a function generating authorization headers for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token(user_id=user.id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
