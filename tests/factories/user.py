"""User factory for tests."""

from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from cradle_access.core.constants import USER_STATUS_ACTIVE
from cradle_access.core.permissions.models import Permission, Role
from cradle_access.modules.users.models import User


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances.

    Relationship collections start empty; tests grant roles explicitly.
    """

    __model__ = User
    __set_relationships__ = True

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def full_name(cls) -> str:
        """Generate a full name."""
        return f"Test User {uuid4().hex[:4]}"

    @classmethod
    def status(cls) -> str:
        """Default to active."""
        return USER_STATUS_ACTIVE

    @classmethod
    def roles(cls) -> list[Role]:
        return []

    @classmethod
    def direct_permissions(cls) -> list[Permission]:
        return []
