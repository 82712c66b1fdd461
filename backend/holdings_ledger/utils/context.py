# backend/holdings_ledger/utils/context.py
"""
Request context management.

Request-scoped values kept in contextvars so they follow async/await and
worker threads:
- Correlation ID for request tracing (set by CorrelationIdMiddleware)
- Acting user ID (set by get_current_user, read by the activity logger)

Usage:
    from holdings_ledger.utils.context import get_correlation_id

    correlation_id = get_correlation_id()
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)


# =============================================================================
# ACTING USER
# =============================================================================

def get_current_user_id() -> int | None:
    """Return the authenticated user for the current request, if any."""
    return _user_id_var.get()


def set_current_user_id(user_id: int | None) -> None:
    _user_id_var.set(user_id)
