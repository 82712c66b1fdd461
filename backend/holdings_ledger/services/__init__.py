# backend/holdings_ledger/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions as parameters (not via Depends)
- Take the as-of date as a parameter; engines never read the clock

Usage:
    from holdings_ledger.services import HoldingNotFoundError, InsufficientValueError
    from holdings_ledger.services.valuation import ValuationCalculator, PeriodCalculator
    from holdings_ledger.services.ledger import TransactionService
    from holdings_ledger.services.reports import DashboardService, ReportService

Architecture:
    services/
    ├── __init__.py                  # This file - exception exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Colors, size ranges, defaults, limits
    ├── protocols.py                 # Record and collaborator interfaces
    ├── auth/                        # Bearer token handling
    ├── valuation/                   # Ledger replay engine
    │   ├── calculators.py           # Point-in-time valuation
    │   └── history_calculator.py    # Month / year period series
    ├── analytics/                   # Per-holding metrics
    │   ├── returns.py               # Gain/loss, CAGR
    │   ├── ranking.py               # Ranked views, category summaries
    │   └── distribution.py          # Category/status/size breakdowns
    ├── ledger/                      # Persistence-facing services
    │   ├── store.py                 # SQLAlchemy LedgerStore
    │   ├── holdings.py              # Holding lifecycle
    │   ├── transactions.py          # Atomic ledger posting
    │   ├── portfolios.py            # Portfolio grouping
    │   └── activity.py              # Audit records
    └── reports/                     # Rounded payload composition
        ├── snapshot.py              # One-session ledger load
        ├── formatting.py            # Rounding, time-ago labels
        ├── items.py                 # Engine results to response items
        ├── dashboard.py             # Dashboard composer
        ├── reports.py               # Report composer, date presets
        ├── types.py                 # Report vocabularies
        └── export.py                # CSV / JSON export
"""

from holdings_ledger.services.exceptions import (
    BusinessRuleError,
    FutureDateError,
    HoldingNotFoundError,
    InsufficientValueError,
    InvalidCredentialsError,
    InvalidDateRangeError,
    InvalidUpdateError,
    NotFoundError,
    PermissionDeniedError,
    PortfolioNotEmptyError,
    PortfolioNotFoundError,
    ServiceError,
    TokenExpiredError,
    TransactionNotFoundError,
    ValidationError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "FutureDateError",
    "InvalidUpdateError",
    "InvalidDateRangeError",
    "BusinessRuleError",
    "InsufficientValueError",
    "PortfolioNotEmptyError",
    "NotFoundError",
    "HoldingNotFoundError",
    "PortfolioNotFoundError",
    "TransactionNotFoundError",
    "PermissionDeniedError",
    "InvalidCredentialsError",
    "TokenExpiredError",
]
