# backend/holdings_ledger/services/reports/__init__.py
"""
Reports Package.

Turns engine results into rounded dashboard and report payloads:
- DashboardComposer / DashboardService: dashboard widgets
- ReportComposer / ReportService: six reports, date presets, exports
- formatting: 2-place rounding and relative time text

Composers are pure (snapshot and dates in, models out); services load the
snapshot and read the clock.
"""

from holdings_ledger.services.reports.dashboard import DashboardComposer, DashboardService
from holdings_ledger.services.reports.formatting import round_currency, round_percentage, time_ago
from holdings_ledger.services.reports.reports import ReportComposer, ReportService, resolve_date_range
from holdings_ledger.services.reports.snapshot import LedgerSnapshot, load_snapshot, snapshot_isolation_level
from holdings_ledger.services.reports.types import DateRangePreset, ExportedReport, ExportFormat, ReportType

__all__ = [
    "DashboardComposer",
    "DashboardService",
    "ReportComposer",
    "ReportService",
    "LedgerSnapshot",
    "load_snapshot",
    "snapshot_isolation_level",
    "resolve_date_range",
    "round_currency",
    "round_percentage",
    "time_ago",
    "ReportType",
    "ExportFormat",
    "DateRangePreset",
    "ExportedReport",
]
