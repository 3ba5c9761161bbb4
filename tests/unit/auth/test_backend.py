"""Unit tests for access token handling."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from cradle_access.config import settings
from cradle_access.core.auth.backend import create_access_token, decode_token


pytestmark = pytest.mark.unit


class TestAccessTokens:
    """Tests for JWT access token functions."""

    def test_create_access_token_returns_jwt(self):
        """create_access_token should return a JWT string."""
        token = create_access_token(uuid4())

        assert isinstance(token, str)
        # JWT has three parts separated by dots
        assert token.count(".") == 2

    def test_tokens_are_unique(self):
        """Each token carries its own jti."""
        user_id = uuid4()

        assert create_access_token(user_id) != create_access_token(user_id)

    def test_decode_token_valid(self):
        """decode_token should decode a valid token."""
        user_id = uuid4()

        data = decode_token(create_access_token(user_id))

        assert data is not None
        assert data.user_id == user_id
        assert data.type == "access"

    def test_decode_token_ignores_additional_claims(self):
        """Extra claims are encoded but only the identity is decoded."""
        user_id = uuid4()

        data = decode_token(create_access_token(user_id, additional_claims={"scope": "x"}))

        assert data is not None
        assert data.user_id == user_id

    def test_decode_token_invalid(self):
        """decode_token should return None for invalid token."""
        assert decode_token("invalid.token.here") is None

    def test_decode_token_expired(self):
        """decode_token should return None for expired token."""
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))

        assert decode_token(token) is None

    def test_decode_token_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999, "type": "access"},
            "another-secret-that-is-long-enough-0123456789",
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_decode_token_without_subject(self):
        token = jwt.encode(
            {"exp": 9999999999, "type": "access"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_decode_token_with_malformed_subject(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None
