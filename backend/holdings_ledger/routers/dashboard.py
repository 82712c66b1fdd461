# backend/holdings_ledger/routers/dashboard.py
"""
Dashboard endpoints.

GET /dashboard returns every widget in one payload. The widget endpoints
return one piece each, for clients that refresh them independently.

Every value is computed on read from the user's holdings and ledgers;
money and percentages are rounded to 2 places.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from holdings_ledger.config import settings
from holdings_ledger.database import get_db
from holdings_ledger.dependencies import get_current_user, get_dashboard_service
from holdings_ledger.models import User
from holdings_ledger.schemas.analytics import RankedPerformanceItem
from holdings_ledger.schemas.dashboard import (
    AssetAllocationResponse,
    DashboardResponse,
    MonthlyPerformanceItem,
    PerformanceChartResponse,
    PortfolioBreakdownResponse,
    QuickStatsResponse,
    RecentTransactionItem,
    SummaryCardsResponse,
)
from holdings_ledger.services.constants import (
    DEFAULT_CHART_MONTHS,
    DEFAULT_PERFORMER_COUNT,
    DEFAULT_RECENT_TRANSACTIONS,
    MAX_RECENT_TRANSACTIONS,
)
from holdings_ledger.services.reports import DashboardService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/",
    response_model=DashboardResponse,
    summary="Full dashboard",
)
def get_dashboard(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    return service.dashboard(db, current_user.id)


@router.get("/summary", response_model=SummaryCardsResponse, summary="Summary cards")
def get_summary_cards(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> SummaryCardsResponse:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.summary_cards(snapshot, _now().date())


@router.get("/performance-chart", response_model=PerformanceChartResponse, summary="Value over time")
def get_performance_chart(
        months: int = Query(default=DEFAULT_CHART_MONTHS, ge=1, le=settings.report_max_trend_months),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> PerformanceChartResponse:
    """
    Month-end values of the trailing **months** months, oldest first, next
    to the principal invested by each month end.
    """
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.performance_chart(snapshot, _now().date(), months)


@router.get(
    "/monthly-performance",
    response_model=list[MonthlyPerformanceItem],
    summary="Growth per month",
)
def get_monthly_performance(
        months: int = Query(default=DEFAULT_CHART_MONTHS, ge=1, le=settings.report_max_trend_months),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> list[MonthlyPerformanceItem]:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.monthly_performance(snapshot, _now().date(), months)


@router.get("/allocation", response_model=AssetAllocationResponse, summary="Allocation by category")
def get_asset_allocation(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> AssetAllocationResponse:
    """Active holdings only."""
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.asset_allocation(snapshot.holdings)


@router.get(
    "/recent-transactions",
    response_model=list[RecentTransactionItem],
    summary="Most recently recorded transactions",
)
def get_recent_transactions(
        limit: int = Query(default=DEFAULT_RECENT_TRANSACTIONS, ge=1, le=MAX_RECENT_TRANSACTIONS),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> list[RecentTransactionItem]:
    recent = service.recent(db, current_user.id, limit)
    return service.composer.recent_transactions(recent, _now())


@router.get(
    "/top-performers",
    response_model=list[RankedPerformanceItem],
    summary="Best holdings by gain percentage",
)
def get_top_performers(
        count: int = Query(default=DEFAULT_PERFORMER_COUNT, ge=1, le=settings.report_default_top_count),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> list[RankedPerformanceItem]:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.top_performers(snapshot.holdings, _now().date(), count)


@router.get(
    "/worst-performers",
    response_model=list[RankedPerformanceItem],
    summary="Weakest holdings by gain percentage",
)
def get_worst_performers(
        count: int = Query(default=DEFAULT_PERFORMER_COUNT, ge=1, le=settings.report_default_top_count),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> list[RankedPerformanceItem]:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.worst_performers(snapshot.holdings, _now().date(), count)


@router.get("/quick-stats", response_model=QuickStatsResponse, summary="Today and month-to-date")
def get_quick_stats(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> QuickStatsResponse:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.quick_stats(snapshot, _now().date())


@router.get("/breakdown", response_model=PortfolioBreakdownResponse, summary="Split by status")
def get_portfolio_breakdown(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: DashboardService = Depends(get_dashboard_service),
) -> PortfolioBreakdownResponse:
    snapshot = service.snapshot(db, current_user.id)
    return service.composer.portfolio_breakdown(snapshot.holdings)
