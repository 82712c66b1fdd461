# backend/holdings_ledger/utils/__init__.py
"""
Utility modules for Holdings Ledger.

This package contains cross-cutting utilities used throughout the application:
- logging: Logging configuration and setup with correlation ID support
- context: Request context (correlation id, current user id)
- date_utils: Calendar month/year boundaries and labels
- sql: SQL query construction helpers (LIKE escaping)

Usage:
    from holdings_ledger.utils import setup_logging, get_logger
    from holdings_ledger.utils import get_correlation_id, set_correlation_id
    from holdings_ledger.utils.date_utils import trailing_months
"""

from holdings_ledger.utils.context import (
    clear_correlation_id,
    get_correlation_id,
    get_current_user_id,
    set_correlation_id,
    set_current_user_id,
)
from holdings_ledger.utils.logging import get_logger, setup_logging
from holdings_ledger.utils.sql import escape_like_pattern

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "get_current_user_id",
    "set_current_user_id",
    # SQL
    "escape_like_pattern",
]
