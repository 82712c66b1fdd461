# backend/holdings_ledger/routers/__init__.py
"""
API routers for Holdings Ledger.

Each router handles a specific domain:
- holdings: Holding lifecycle, filtered listing, stats
- transactions: Ledger entries (post, preview, list)
- portfolios: Portfolio grouping and per-portfolio stats
- dashboard: Dashboard payload and individual widgets
- reports: Six reports, date-range presets, CSV/JSON export
"""

from holdings_ledger.routers.dashboard import router as dashboard_router
from holdings_ledger.routers.holdings import router as holdings_router
from holdings_ledger.routers.portfolios import router as portfolios_router
from holdings_ledger.routers.reports import router as reports_router
from holdings_ledger.routers.transactions import router as transactions_router

__all__ = [
    "holdings_router",
    "transactions_router",
    "portfolios_router",
    "dashboard_router",
    "reports_router",
]
