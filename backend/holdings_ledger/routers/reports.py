# backend/holdings_ledger/routers/reports.py
"""
Report endpoints.

Six reports, each available as JSON through its own endpoint and as a
download through /reports/export/{report_type}:

- performance     totals, top and worst holdings, category split, trend
- distribution    category, status and size splits
- transactions    ledger history with type and month breakdowns
- monthly         month-by-month growth
- yearoveryear    year-by-year growth and comparisons
- topperforming   rankings by gain %, absolute gain and current value

Date-filtered reports take either explicit start_date / end_date or a
preset (last7days, last30days, last3months, last6months, last12months,
thisyear, lastyear, alltime). A preset wins over explicit dates.
"""

import logging
from datetime import date, datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from holdings_ledger.config import settings
from holdings_ledger.database import get_db
from holdings_ledger.dependencies import get_current_user, get_report_service
from holdings_ledger.middleware.rate_limit import RATE_LIMIT_REPORTS, limiter
from holdings_ledger.models import User
from holdings_ledger.schemas.reports import (
    DateRangeResponse,
    DistributionReport,
    MonthlyTrendReport,
    PerformanceSummaryReport,
    ReportTypeItem,
    TopPerformingReport,
    TransactionHistoryReport,
    YearOverYearReport,
)
from holdings_ledger.schemas.validators import enum_validator
from holdings_ledger.services.constants import DEFAULT_CHART_MONTHS
from holdings_ledger.services.reports import ReportComposer, ReportService, resolve_date_range
from holdings_ledger.services.reports.types import ExportFormat, ReportType

logger = logging.getLogger(__name__)

ReportTypeParam = Annotated[ReportType, enum_validator(ReportType)]
ExportFormatQuery = Annotated[ExportFormat, enum_validator(ExportFormat)]

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _today() -> date:
    return datetime.now(timezone.utc).date()


def report_period(
        start_date: date | None = Query(default=None, description="Inclusive start"),
        end_date: date | None = Query(default=None, description="Inclusive end"),
        preset: str | None = Query(default=None, description="Named range, e.g. thisyear"),
) -> tuple[date | None, date | None]:
    """
    Dependency resolving the (start, end) of a date-filtered report.

    Raises:
        InvalidDateRangeError: Unknown preset (start > end is checked by the service)
    """
    if preset:
        return resolve_date_range(preset, _today())
    return start_date, end_date


ReportPeriod = Annotated[tuple[date | None, date | None], Depends(report_period)]


# =============================================================================
# METADATA ENDPOINTS
# =============================================================================

@router.get("/types", response_model=list[ReportTypeItem], summary="Available reports")
def list_report_types(current_user: User = Depends(get_current_user)) -> list[ReportTypeItem]:
    return ReportComposer.report_types()


@router.get("/date-range", response_model=DateRangeResponse, summary="Resolve a date-range preset")
def get_date_range(
        preset: str = Query(..., examples=["last30days", "thisyear"]),
        current_user: User = Depends(get_current_user),
) -> DateRangeResponse:
    """start_date is null for **alltime**."""
    return ReportComposer.date_range(preset, _today())


# =============================================================================
# REPORT ENDPOINTS
# =============================================================================

@router.get("/performance", response_model=PerformanceSummaryReport, summary="Performance summary")
@limiter.limit(RATE_LIMIT_REPORTS)
def performance_report(
        request: Request,
        period: ReportPeriod,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> PerformanceSummaryReport:
    """Holdings purchased in the period and transactions dated in it."""
    start, end = period
    return service.performance_summary(db, current_user.id, start, end)


@router.get("/distribution", response_model=DistributionReport, summary="Holdings distribution")
@limiter.limit(RATE_LIMIT_REPORTS)
def distribution_report(
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> DistributionReport:
    return service.distribution_report(db, current_user.id)


@router.get("/transactions", response_model=TransactionHistoryReport, summary="Transaction history")
@limiter.limit(RATE_LIMIT_REPORTS)
def transaction_report(
        request: Request,
        period: ReportPeriod,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> TransactionHistoryReport:
    start, end = period
    return service.transaction_history(db, current_user.id, start, end)


@router.get("/monthly", response_model=MonthlyTrendReport, summary="Monthly trend")
@limiter.limit(RATE_LIMIT_REPORTS)
def monthly_report(
        request: Request,
        months: int = Query(default=DEFAULT_CHART_MONTHS, ge=1, le=settings.report_max_trend_months),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> MonthlyTrendReport:
    return service.monthly_trend(db, current_user.id, months)


@router.get("/year-over-year", response_model=YearOverYearReport, summary="Year-over-year comparison")
@limiter.limit(RATE_LIMIT_REPORTS)
def year_over_year_report(
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> YearOverYearReport:
    """From the year of the first purchase through the current year."""
    return service.year_over_year(db, current_user.id)


@router.get("/top-performing", response_model=TopPerformingReport, summary="Top performing holdings")
@limiter.limit(RATE_LIMIT_REPORTS)
def top_performing_report(
        request: Request,
        period: ReportPeriod,
        top_count: int | None = Query(default=None, ge=1, le=100),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> TopPerformingReport:
    start, end = period
    return service.top_performing(db, current_user.id, start, end, top_count)


# =============================================================================
# EXPORT
# =============================================================================

@router.get(
    "/export/{report_type}",
    summary="Download a report",
    response_class=Response,
    responses={
        200: {
            "content": {"text/csv": {}, "application/json": {}},
            "description": "The report as an attachment",
        },
    },
)
@limiter.limit(RATE_LIMIT_REPORTS)
def export_report(
        request: Request,
        report_type: ReportTypeParam,
        period: ReportPeriod,
        fmt: ExportFormatQuery = Query(default=ExportFormat.JSON, alias="format"),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: ReportService = Depends(get_report_service),
) -> Response:
    """
    - **format=json**: every report
    - **format=csv**: performance and transactions only (400 otherwise)
    """
    start, end = period
    exported = service.export(db, current_user.id, report_type, fmt, start, end)

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
