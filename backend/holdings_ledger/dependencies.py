# backend/holdings_ledger/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. The services are stateless apart from their collaborators,
so one instance per process is enough.

Services are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from holdings_ledger.dependencies import get_current_user, get_transaction_service

    @router.post("/")
    def create_transaction(
        service: TransactionService = Depends(get_transaction_service),
        current_user: User = Depends(get_current_user),
    ):
        ...
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from holdings_ledger.config import settings
from holdings_ledger.database import get_db
from holdings_ledger.models import User
from holdings_ledger.services.auth.jwt_handler import JWTHandler
from holdings_ledger.services.exceptions import InvalidCredentialsError, TokenExpiredError
from holdings_ledger.services.ledger import (
    HoldingService,
    LoggingActivityLogger,
    PortfolioService,
    SqlLedgerStore,
    TransactionService,
)
from holdings_ledger.services.reports import DashboardService, ReportService
from holdings_ledger.services.valuation import ValuationCalculator
from holdings_ledger.utils.context import set_current_user_id

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication
_bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_ledger_store, get_activity_logger (no deps)
# 2. ledger services (store + activity)
# 3. dashboard / report services (store)


@lru_cache(maxsize=1)
def get_ledger_store() -> SqlLedgerStore:
    logger.debug("Initializing singleton SqlLedgerStore")
    return SqlLedgerStore()


@lru_cache(maxsize=1)
def get_activity_logger() -> LoggingActivityLogger:
    logger.debug("Initializing singleton LoggingActivityLogger")
    return LoggingActivityLogger()


@lru_cache(maxsize=1)
def get_holding_service() -> HoldingService:
    logger.debug("Initializing singleton HoldingService")
    return HoldingService(store=get_ledger_store(), activity=get_activity_logger())


@lru_cache(maxsize=1)
def get_transaction_service() -> TransactionService:
    """
    Get the singleton TransactionService instance.

    The only writer of Holding.current_value.
    """
    logger.debug("Initializing singleton TransactionService")
    return TransactionService(
        store=get_ledger_store(),
        calculator=ValuationCalculator(),
        activity=get_activity_logger(),
    )


@lru_cache(maxsize=1)
def get_portfolio_service() -> PortfolioService:
    logger.debug("Initializing singleton PortfolioService")
    return PortfolioService(store=get_ledger_store(), activity=get_activity_logger())


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    logger.debug("Initializing singleton DashboardService")
    return DashboardService(store=get_ledger_store())


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    logger.debug("Initializing singleton ReportService")
    return ReportService(store=get_ledger_store(), default_top_count=settings.report_default_top_count)


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """
    Dependency that extracts and validates the current user from JWT.

    Also stores the user id in the request context so log records and
    activity entries can be attributed.

    Raises:
        HTTPException 401: No token, invalid/expired token, unknown or inactive user
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        user_id = JWTHandler.user_id_from_token(credentials.credentials)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except InvalidCredentialsError as e:
        raise _unauthorized(str(e))

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User account is inactive")

    set_current_user_id(user.id)
    return user


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

def clear_service_caches() -> None:
    """
    Clear all service caches.

    Useful for testing or when you need to reset state.
    """
    get_ledger_store.cache_clear()
    get_activity_logger.cache_clear()
    get_holding_service.cache_clear()
    get_transaction_service.cache_clear()
    get_portfolio_service.cache_clear()
    get_dashboard_service.cache_clear()
    get_report_service.cache_clear()
    logger.info("Cleared all service singleton caches")
