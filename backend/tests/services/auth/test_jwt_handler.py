# tests/services/auth/test_jwt_handler.py
"""
Tests for bearer token handling.

Tests:
- Access token creation with correct claims
- Token validation (valid, expired, tampered, wrong type)
- Subject extraction
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from holdings_ledger.config import settings
from holdings_ledger.services.auth.jwt_handler import JWTHandler
from holdings_ledger.services.exceptions import InvalidCredentialsError, TokenExpiredError


# =============================================================================
# TEST: ACCESS TOKEN CREATION
# =============================================================================

class TestCreateAccessToken:
    """Tests for access token creation."""

    def test_create_token_is_valid_jwt(self):
        token = JWTHandler.create_access_token(user_id=1, email="test@example.com")

        assert isinstance(token, str)
        assert len(token.split(".")) == 3

    def test_token_contains_correct_claims(self):
        token = JWTHandler.create_access_token(user_id=123, email="user@example.com")

        payload = JWTHandler.validate_access_token(token)

        assert payload["sub"] == "123"
        assert payload["email"] == "user@example.com"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_token_with_custom_expiry(self):
        token = JWTHandler.create_access_token(
            user_id=1, email="test@example.com", expires_delta=timedelta(hours=2)
        )

        payload = JWTHandler.validate_access_token(token)
        exp_time = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        iat_time = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)

        assert timedelta(hours=1, minutes=59) < exp_time - iat_time < timedelta(hours=2, minutes=1)


# =============================================================================
# TEST: TOKEN VALIDATION
# =============================================================================

class TestValidateAccessToken:
    """Tests for signature, expiry and type checks."""

    def test_expired_token(self):
        token = JWTHandler.create_access_token(
            user_id=1, email="test@example.com", expires_delta=timedelta(seconds=-10)
        )

        with pytest.raises(TokenExpiredError):
            JWTHandler.validate_access_token(token)

    def test_tampered_signature(self):
        token = JWTHandler.create_access_token(user_id=1, email="test@example.com")
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"

        with pytest.raises(InvalidCredentialsError):
            JWTHandler.validate_access_token(tampered)

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "1", "type": "access"},
            "some-other-secret-that-is-long-enough",
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(InvalidCredentialsError):
            JWTHandler.validate_access_token(token)

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": "1", "type": "refresh"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
        )

        with pytest.raises(InvalidCredentialsError, match="Invalid token type"):
            JWTHandler.validate_access_token(token)

    def test_garbage(self):
        with pytest.raises(InvalidCredentialsError):
            JWTHandler.validate_access_token("not-a-token")


class TestUserIdFromToken:

    def test_returns_int_subject(self):
        token = JWTHandler.create_access_token(user_id=77, email="x@example.com")

        assert JWTHandler.user_id_from_token(token) == 77

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {"sub": "alice", "type": "access"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
        )

        with pytest.raises(InvalidCredentialsError, match="subject"):
            JWTHandler.user_id_from_token(token)
