"""FastAPI dependencies for the acting user.

The bearer token is verified here; the user it names is loaded and
refused if inactive, before any permission is evaluated.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cradle_access.core.auth.backend import decode_token
from cradle_access.core.auth.schemas import TokenData
from cradle_access.core.errors import ForbiddenError, UnauthorizedError
from cradle_access.modules.users.models import User
from cradle_access.modules.users.repos import UserRepo


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthorizedError: If token is missing, invalid or not an access token
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != "access":
        raise UnauthorizedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    request: Request,
    token_data: Annotated[TokenData, Depends(get_token_data)],
    repo: UserRepo,
) -> User:
    """Get the authenticated, active user.

    Raises:
        UnauthorizedError: If the user no longer exists
        ForbiddenError: If the user is inactive
    """
    user = await repo.get_by_id(token_data.user_id)

    if not user:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    request.state.user_id = user.id
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
