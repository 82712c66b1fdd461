# backend/holdings_ledger/services/auth/__init__.py
"""
Authentication services for Holdings Ledger.

Usage:
    from holdings_ledger.services.auth import JWTHandler

    token = JWTHandler.create_access_token(user_id=1, email="user@example.com")
    user_id = JWTHandler.user_id_from_token(token)
"""

from holdings_ledger.services.auth.jwt_handler import JWTHandler

__all__ = [
    "JWTHandler",
]
