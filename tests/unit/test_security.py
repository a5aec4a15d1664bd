"""Tests for access token verification."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from trust_engine.config import settings
from trust_engine.core.security import create_access_token, verify_access_token


@pytest.mark.unit
class TestAccessTokens:
    def test_valid_token(self):
        token = create_access_token(17)
        assert verify_access_token(token) == 17

    def test_expired_token(self):
        token = create_access_token(17, expires_delta=timedelta(seconds=-1))
        assert verify_access_token(token) is None

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "17", "type": "access", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            "not-the-secret",
            algorithm=settings.ALGORITHM,
        )
        assert verify_access_token(token) is None

    def test_refresh_token_type_rejected(self):
        token = jwt.encode(
            {"sub": "17", "type": "refresh", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        assert verify_access_token(token) is None

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {"sub": "abc", "type": "access", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        assert verify_access_token(token) is None

    def test_garbage(self):
        assert verify_access_token("not.a.token") is None
