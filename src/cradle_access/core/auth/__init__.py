"""Authentication boundary: access token verification and the current user."""

from cradle_access.core.auth.backend import create_access_token, decode_token


__all__ = [
    "create_access_token",
    "decode_token",
]
