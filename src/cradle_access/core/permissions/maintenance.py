"""Role maintenance jobs.

The application gives each user one role, but the schema allows several.
``collapse_to_primary_role`` repairs users holding more than one role by
keeping only the highest-priority one. It is an explicit maintenance
command; authorization itself always unions every role a user holds.
"""

from collections import defaultdict
from collections.abc import Sequence
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cradle_access.config import settings
from cradle_access.core.permissions.models import Role, UserRole


logger = structlog.get_logger()


def pick_primary_role(role_slugs: Sequence[str], priority: Sequence[str]) -> str:
    """Pick the highest-priority role slug.

    Slugs missing from ``priority`` rank below every listed role; ties keep
    the first slug given.
    """
    rank = {slug: index for index, slug in enumerate(priority)}
    return min(role_slugs, key=lambda slug: rank.get(slug, len(priority)))


async def collapse_to_primary_role(
    session: AsyncSession,
    priority: Sequence[str] | None = None,
) -> dict[UUID, str]:
    """Reduce every multi-role user to their highest-priority role.

    Args:
        session: Database session; the caller commits
        priority: Role slugs, highest priority first (defaults to settings)

    Returns:
        Mapping of repaired user IDs to the role slug they kept
    """
    priority = priority or settings.role_priority

    multi_role_users = (
        select(UserRole.user_id)
        .group_by(UserRole.user_id)
        .having(func.count() > 1)
    )
    result = await session.execute(
        select(UserRole.user_id, Role.id, Role.slug)
        .join(Role, Role.id == UserRole.role_id)
        .where(UserRole.user_id.in_(multi_role_users))
        .order_by(UserRole.created_at)
    )

    held: dict[UUID, dict[str, UUID]] = defaultdict(dict)
    for user_id, role_id, slug in result.all():
        held[user_id][slug] = role_id

    repaired: dict[UUID, str] = {}
    for user_id, roles in held.items():
        keep = pick_primary_role(list(roles), priority)
        await session.execute(
            delete(UserRole).where(
                UserRole.user_id == user_id,
                UserRole.role_id != roles[keep],
            )
        )
        repaired[user_id] = keep
        logger.info(
            "user_roles_collapsed",
            user_id=str(user_id),
            kept=keep,
            dropped=sorted(slug for slug in roles if slug != keep),
        )

    await session.flush()
    return repaired
