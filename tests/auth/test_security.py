"""Tests for JWT access token handling."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from rehabtrack.auth.security import create_access_token, decode_access_token
from rehabtrack.config import get_settings


class TestAccessToken:
    """Tests for token creation and validation."""

    def test_round_trip_claims(self) -> None:
        user_id = uuid4()
        token = create_access_token(user_id, "patient", email="p@test.com")

        payload = decode_access_token(token)

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "patient"
        assert payload["email"] == "p@test.com"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self) -> None:
        token = create_access_token(
            uuid4(), "patient", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_token_type_is_rejected(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "role": "patient", "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError, match="Invalid token type"):
            decode_access_token(token)

    def test_missing_role_is_rejected(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "access"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError, match="Missing required claims"):
            decode_access_token(token)

    def test_foreign_signature_is_rejected(self) -> None:
        token = jwt.encode(
            {"sub": str(uuid4()), "role": "admin", "type": "access"},
            "another-secret-key-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(JWTError):
            decode_access_token(token)
