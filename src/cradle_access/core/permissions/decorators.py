"""Permission decorators for route protection.

These decorators guard FastAPI routes with global permission checks.
The decorated route must declare ``current_user: CurrentUser`` and
``access: AccessEngine`` parameters so the check runs on the request's
engine (and its request-scoped resolver cache).

Device-scoped and ownership checks need the target object, so routes
call ``access.require(current_user, action, target)`` themselves.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

import structlog

from cradle_access.core.errors import AccessDeniedError, ForbiddenError


if TYPE_CHECKING:
    from cradle_access.core.permissions.engine import AccessDecisionEngine
    from cradle_access.modules.users.models import User


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _get_user_and_engine(
    kwargs: dict[str, Any],
) -> tuple["User", "AccessDecisionEngine"]:
    """Extract the acting user and the engine from route kwargs.

    Raises:
        ForbiddenError: If the route is missing either dependency
    """
    user = cast("User | None", kwargs.get("current_user"))
    engine = cast("AccessDecisionEngine | None", kwargs.get("access"))

    if user is None:
        raise ForbiddenError("Authentication required", error_code="auth_required")
    if engine is None:
        raise ForbiddenError(
            "Permission check failed",
            error_code="permission_check_failed",
        )
    return user, engine


def _guard(
    slugs: list[str],
    require_all: bool,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, engine = _get_user_and_engine(kwargs)

            if require_all:
                allowed = await engine.resolver.has_all_permissions(user, slugs)
            else:
                allowed = await engine.resolver.has_any_permission(user, slugs)

            if not allowed:
                logger.info(
                    "route_permission_denied",
                    user_id=str(user.id),
                    required=slugs,
                    require_all=require_all,
                )
                qualifier = "all of" if require_all else "one of"
                raise AccessDeniedError(
                    f"Missing required permission. Need {qualifier}: {', '.join(slugs)}",
                    details={"required_permissions": slugs},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    slug: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a global permission to access a route.

    Usage:
        @router.delete("/permissions/{slug}")
        @require_permission("role.delete")
        async def delete_permission(
            slug: str, current_user: CurrentUser, access: AccessEngine
        ):
            ...

    Raises:
        AccessDeniedError: If the user lacks the permission
    """
    return _guard([slug], require_all=True)


def require_any_permission(
    slugs: list[str],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the given global permissions."""
    return _guard(slugs, require_all=False)


def require_all_permissions(
    slugs: list[str],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires every one of the given global permissions."""
    return _guard(slugs, require_all=True)
