"""Tests for JWT session token handling."""

from datetime import timedelta

import jwt
import pytest

from surtidores.config import settings
from surtidores.core.security import create_access_token, verify_access_token


@pytest.mark.unit
class TestAccessTokens:
    def test_round_trip(self):
        token = create_access_token(42)

        assert verify_access_token(token) == 42

    def test_expired_token(self):
        token = create_access_token(42, expires_delta=timedelta(seconds=-1))

        assert verify_access_token(token) is None

    def test_garbage_token(self):
        assert verify_access_token("not-a-token") is None

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "42", "type": "access"}, "other-secret", algorithm="HS256")

        assert verify_access_token(token) is None

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": "42", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )

        assert verify_access_token(token) is None

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {"sub": "abc", "type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )

        assert verify_access_token(token) is None
