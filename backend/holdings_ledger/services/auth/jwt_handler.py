# backend/holdings_ledger/services/auth/jwt_handler.py
"""
Bearer token handling for the ledger API.

Only access tokens are understood here: the ledger trusts an upstream
identity provider (or tests) to issue them with the shared secret.

Token claims:
- sub: User ID (string)
- email: User's email
- exp / iat: Expiry and issue timestamps
- type: "access"
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from holdings_ledger.config import settings
from holdings_ledger.services.exceptions import InvalidCredentialsError, TokenExpiredError

ACCESS_TOKEN_TYPE = "access"


class JWTHandler:
    """Stateless HS256 access-token encode/decode."""

    @staticmethod
    def create_access_token(
        user_id: int,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """
        Example:
            token = JWTHandler.create_access_token(user_id=1, email="user@example.com")
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)

        issued = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "exp": issued + expires_delta,
            "iat": issued,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def validate_access_token(token: str) -> dict[str, Any]:
        """
        Verify signature, expiry and token type.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidCredentialsError: Bad signature, malformed or wrong type
        """
        try:
            claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Access token has expired")
        except JWTError as e:
            raise InvalidCredentialsError(f"Invalid token: {str(e)}")

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidCredentialsError("Invalid token type")
        return claims

    @staticmethod
    def user_id_from_token(token: str) -> int:
        """Validated `sub` claim as an int."""
        claims = JWTHandler.validate_access_token(token)
        try:
            return int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise InvalidCredentialsError("Token has no valid subject")
