# backend/holdings_ledger/middleware/rate_limit.py
"""
Rate limiting for API protection.

Uses slowapi keyed by client IP. Limits are defined in
services/constants.py per endpoint type:

    RATE_LIMIT_DEFAULT   reads
    RATE_LIMIT_WRITE     holding / transaction / portfolio writes
    RATE_LIMIT_REPORTS   report generation and exports
    RATE_LIMIT_HEALTH    health checks

The limiter is disabled when settings.rate_limit_enabled is false (test mode).

Usage:
    from holdings_ledger.middleware.rate_limit import limiter, RATE_LIMIT_WRITE

    @router.post("/")
    @limiter.limit(RATE_LIMIT_WRITE)
    def create_holding(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from holdings_ledger.config import settings
from holdings_ledger.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_REPORTS,
    RATE_LIMIT_WRITE,
)

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60


def _is_trusted_proxy(request: Request) -> bool:
    """Forwarded headers are honoured only from configured proxies."""
    if settings.trust_proxy_headers:
        return True
    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Client IP for rate-limit keys.

    X-Forwarded-For (first entry) or X-Real-IP when the direct peer is a
    trusted proxy, otherwise the direct peer address.
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return get_remote_address(request)


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

# In-memory storage (single-instance deployments)
limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the shared ErrorDetail shape, with Retry-After."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_REPORTS",
    "RATE_LIMIT_HEALTH",
]
