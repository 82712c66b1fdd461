# backend/holdings_ledger/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For each request:
1. Take the correlation ID from X-Correlation-ID, else X-Request-ID,
   else generate a UUID
2. Store it in the request context (read by CorrelationIdFilter and the
   activity logger)
3. Echo it on the response and log one line per request with its duration
4. Clear the request context afterwards

Client Usage:
    curl -H "X-Correlation-ID: my-trace-123" http://localhost:8000/health
    # Response header: X-Correlation-ID: my-trace-123
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from holdings_ledger.utils.context import clear_correlation_id, set_correlation_id, set_current_user_id

logger = logging.getLogger(__name__)

# Header names for correlation ID
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def resolve_correlation_id(request: Request) -> str:
    """Header value in order of precedence, or a fresh UUID."""
    for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to every request and its log records."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = resolve_correlation_id(request)
        set_correlation_id(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({elapsed_ms:.1f} ms)"
            )
            return response

        finally:
            clear_correlation_id()
            set_current_user_id(None)
