"""Shared API dependencies.

FastAPI caches dependencies per request, so every route, decorator and
service in one request shares a single resolver and its permission cache.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.core.database import get_db
from cradle_access.core.permissions.engine import AccessDecisionEngine
from cradle_access.core.permissions.registry import PermissionRegistry
from cradle_access.core.permissions.resolver import UserGrantResolver
from cradle_access.core.permissions.roles import RoleStore
from cradle_access.modules.devices.ledger import DeviceRelationshipLedger


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_resolver(db: DBSession) -> UserGrantResolver:
    return UserGrantResolver(db)


def get_ledger(db: DBSession) -> DeviceRelationshipLedger:
    return DeviceRelationshipLedger(db)


def get_registry(db: DBSession) -> PermissionRegistry:
    return PermissionRegistry(db)


Resolver = Annotated[UserGrantResolver, Depends(get_resolver)]
Ledger = Annotated[DeviceRelationshipLedger, Depends(get_ledger)]
Registry = Annotated[PermissionRegistry, Depends(get_registry)]


def get_role_store(
    db: DBSession, registry: Registry, resolver: Resolver
) -> RoleStore:
    return RoleStore(db, registry=registry, resolver=resolver)


def get_access_engine(
    db: DBSession, resolver: Resolver, ledger: Ledger
) -> AccessDecisionEngine:
    return AccessDecisionEngine(db, resolver=resolver, ledger=ledger)


Roles = Annotated[RoleStore, Depends(get_role_store)]
AccessEngine = Annotated[AccessDecisionEngine, Depends(get_access_engine)]
