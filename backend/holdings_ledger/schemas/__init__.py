# backend/holdings_ledger/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic schemas organized by domain:
- analytics: Shared result items (performance, distribution, periods)
- dashboard: Dashboard widgets and the combined payload
- errors: Error response formats
- holdings: Holding CRUD, filters and stats
- pagination: Standardized pagination for list endpoints
- portfolios: Portfolio CRUD and stats
- reports: The six reports and report metadata
- transactions: Ledger entries and previews
- validators: Enum decoding and text normalization

Usage:
    from holdings_ledger.schemas import HoldingCreate, HoldingResponse
    from holdings_ledger.schemas import TransactionCreate, TransactionCreatedResponse
    from holdings_ledger.schemas import DashboardResponse
"""

from holdings_ledger.schemas.analytics import (
    CategoryPerformanceItem,
    CategoryTotalsItem,
    DistributionItem,
    PerformanceItem,
    PeriodComparisonItem,
    PeriodItem,
    RankedPerformanceItem,
    SizeBucketItem,
)
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
from holdings_ledger.schemas.errors import ErrorDetail, ValidationErrorDetail
from holdings_ledger.schemas.holdings import (
    HoldingCreate,
    HoldingDetailResponse,
    HoldingFilterParams,
    HoldingListResponse,
    HoldingResponse,
    HoldingStatsResponse,
    HoldingUpdate,
    TransactionTotals,
)
from holdings_ledger.schemas.pagination import PaginationMeta
from holdings_ledger.schemas.portfolios import (
    PortfolioCanDeleteResponse,
    PortfolioCreate,
    PortfolioResponse,
    PortfolioStatsResponse,
    PortfolioSummaryResponse,
    PortfolioUpdate,
)
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
from holdings_ledger.schemas.transactions import (
    TransactionCreate,
    TransactionFilterParams,
    TransactionCreatedResponse,
    TransactionListResponse,
    TransactionPreviewResponse,
    TransactionResponse,
)

__all__ = [
    # Holdings
    "HoldingCreate",
    "HoldingUpdate",
    "HoldingFilterParams",
    "HoldingResponse",
    "HoldingDetailResponse",
    "HoldingListResponse",
    "HoldingStatsResponse",
    "TransactionTotals",

    # Transactions
    "TransactionCreate",
    "TransactionFilterParams",
    "TransactionResponse",
    "TransactionCreatedResponse",
    "TransactionListResponse",
    "TransactionPreviewResponse",

    # Portfolios
    "PortfolioCreate",
    "PortfolioUpdate",
    "PortfolioResponse",
    "PortfolioSummaryResponse",
    "PortfolioStatsResponse",
    "PortfolioCanDeleteResponse",

    # Shared analytics items
    "PerformanceItem",
    "RankedPerformanceItem",
    "CategoryPerformanceItem",
    "CategoryTotalsItem",
    "DistributionItem",
    "SizeBucketItem",
    "PeriodItem",
    "PeriodComparisonItem",

    # Dashboard
    "SummaryCardsResponse",
    "PerformanceChartResponse",
    "MonthlyPerformanceItem",
    "AssetAllocationResponse",
    "RecentTransactionItem",
    "QuickStatsResponse",
    "PortfolioBreakdownResponse",
    "DashboardResponse",

    # Reports
    "PerformanceSummaryReport",
    "DistributionReport",
    "TransactionHistoryReport",
    "MonthlyTrendReport",
    "YearOverYearReport",
    "TopPerformingReport",
    "ReportTypeItem",
    "DateRangeResponse",

    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",

    # Pagination
    "PaginationMeta",
]
