# backend/holdings_ledger/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session

from holdings_ledger.config import settings
from holdings_ledger.database import get_db
from holdings_ledger.middleware import (
    RATE_LIMIT_HEALTH,
    CorrelationIdMiddleware,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)
from holdings_ledger.routers import (
    dashboard_router,
    holdings_router,
    portfolios_router,
    reports_router,
    transactions_router,
)
from holdings_ledger.schemas.errors import ErrorDetail, ValidationErrorDetail
from holdings_ledger.services.exceptions import (
    BusinessRuleError,
    InsufficientValueError,
    NotFoundError,
    PermissionDeniedError,
    PortfolioNotEmptyError,
    ServiceError,
    ValidationError,
)
from holdings_ledger.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Investment holdings ledger with valuation, dashboard and reporting API",
    version="0.1.0",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================
# Origins are configured via CORS_ORIGINS environment variable

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Outermost: every log line of the request carries the correlation ID
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service exceptions carry no HTTP knowledge; the mapping lives here.
#
#   ValidationError   -> 400
#   PermissionDenied  -> 403
#   NotFoundError     -> 404
#   BusinessRuleError -> 422
#   ServiceError      -> 500
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error_response(status_code: int, exc: ServiceError, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=details,
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle caller-correctable input errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return _error_response(400, exc, {"field": exc.field} if exc.field else None)


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    """Handle access to another user's resource (403)."""
    logger.warning(f"Permission denied: {exc.resource_type} {exc.resource_id}")
    return _error_response(
        403, exc, {"resource_type": exc.resource_type, "resource_id": exc.resource_id}
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing or soft-deleted resources (404)."""
    logger.warning(f"Not found: {exc}")
    details = None
    if exc.resource_type:
        details = {"resource_type": exc.resource_type, "resource_id": exc.resource_id}
    return _error_response(404, exc, details)


@app.exception_handler(BusinessRuleError)
async def business_rule_handler(request: Request, exc: BusinessRuleError) -> JSONResponse:
    """Handle ledger rule violations such as an uncovered Sell (422)."""
    logger.warning(f"Business rule violation: {exc}")
    details = None
    if isinstance(exc, InsufficientValueError):
        details = {
            "holding_id": exc.holding_id,
            "current_value": str(exc.current_value),
            "amount": str(exc.amount),
        }
        if exc.resulting_value is not None:
            details["resulting_value"] = str(exc.resulting_value)
    elif isinstance(exc, PortfolioNotEmptyError):
        details = {"portfolio_id": exc.portfolio_id, "holding_count": exc.holding_count}
    return _error_response(422, exc, details)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return _error_response(500, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies and query parameters (422)."""
    errors = [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed on {request.url.path}: {len(errors)} error(s)")
    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(holdings_router)  # /holdings/*
app.include_router(transactions_router)  # /transactions/*
app.include_router(portfolios_router)  # /portfolios/*
app.include_router(dashboard_router)  # /dashboard/*
app.include_router(reports_router)  # /reports/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """
    API root - returns basic application info.
    """
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Health check endpoint.

    **Response Status Codes:**
    - 200: Database reachable
    - 503: Database unreachable - do not route traffic here
    """
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "checks": {"database": {"status": "unhealthy", "error": str(e)}},
            },
        )

    return {
        "status": "healthy",
        "checks": {"database": {"status": "healthy"}},
    }


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """
    Liveness check. Always succeeds while the process is up.
    """
    return {"status": "alive"}
