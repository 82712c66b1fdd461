# backend/holdings_ledger/services/constants.py
"""
Centralized constants for the valuation and reporting services.

Usage:
    from holdings_ledger.services.constants import (
        CALENDAR_DAYS_PER_YEAR,
        CATEGORY_COLORS,
    )
"""

from decimal import Decimal

from holdings_ledger.models import HoldingCategory, HoldingStatus


# =============================================================================
# FINANCIAL CALENDAR
# =============================================================================

# Calendar days per year, used to annualize returns
CALENDAR_DAYS_PER_YEAR: int = 365

# "N months ago" / "N years ago" in relative timestamps
DAYS_PER_MONTH_APPROX: int = 30


# =============================================================================
# ROUNDING
# =============================================================================

CURRENCY_QUANTUM: Decimal = Decimal("0.01")
PERCENTAGE_QUANTUM: Decimal = Decimal("0.01")

ZERO: Decimal = Decimal("0")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# CHART COLORS
# =============================================================================

DEFAULT_COLOR: str = "#6b7280"

CATEGORY_COLORS: dict[HoldingCategory, str] = {
    HoldingCategory.STOCKS: "#3b82f6",
    HoldingCategory.BONDS: "#10b981",
    HoldingCategory.REAL_ESTATE: "#f59e0b",
    HoldingCategory.CRYPTO: "#8b5cf6",
    HoldingCategory.MUTUAL_FUNDS: "#ec4899",
    HoldingCategory.OTHER: "#6b7280",
}

STATUS_COLORS: dict[HoldingStatus, str] = {
    HoldingStatus.ACTIVE: "#10b981",
    HoldingStatus.SOLD: "#6b7280",
    HoldingStatus.ON_HOLD: "#f59e0b",
}


# =============================================================================
# SIZE BUCKETS
# =============================================================================

# (label, lower bound inclusive, upper bound exclusive; None = unbounded)
SIZE_BUCKETS: tuple[tuple[str, Decimal, Decimal | None], ...] = (
    ("< $1,000", Decimal("0"), Decimal("1000")),
    ("$1,000 - $5,000", Decimal("1000"), Decimal("5000")),
    ("$5,000 - $10,000", Decimal("5000"), Decimal("10000")),
    ("$10,000 - $50,000", Decimal("10000"), Decimal("50000")),
    ("$50,000+", Decimal("50000"), None),
)


# =============================================================================
# DASHBOARD / REPORT DEFAULTS
# =============================================================================

DEFAULT_CHART_MONTHS: int = 12
DEFAULT_RECENT_TRANSACTIONS: int = 10
DEFAULT_PERFORMER_COUNT: int = 5
PERFORMANCE_SUMMARY_TOP_COUNT: int = 5
PERFORMANCE_SUMMARY_TREND_MONTHS: int = 6
MAX_RECENT_TRANSACTIONS: int = 50
MAX_PAGE_SIZE: int = 100


# =============================================================================
# RATE LIMITS (slowapi format: "count/period")
# =============================================================================

RATE_LIMIT_DEFAULT: str = "120/minute"
RATE_LIMIT_WRITE: str = "30/minute"
RATE_LIMIT_REPORTS: str = "20/minute"
RATE_LIMIT_HEALTH: str = "300/minute"
