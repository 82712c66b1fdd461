# backend/holdings_ledger/services/reports/types.py
"""
Closed vocabularies of the reports API.

Wire strings are decoded with schemas.validators.parse_enum, so
"thisYear", "THISYEAR" and "this_year" all reach DateRangePreset.THIS_YEAR.
"""

from dataclasses import dataclass
from enum import Enum


class ReportType(str, Enum):
    PERFORMANCE = "performance"
    DISTRIBUTION = "distribution"
    TRANSACTIONS = "transactions"
    MONTHLY = "monthly"
    YEAR_OVER_YEAR = "yearoveryear"
    TOP_PERFORMING = "topperforming"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class DateRangePreset(str, Enum):
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    LAST_3_MONTHS = "last3months"
    LAST_6_MONTHS = "last6months"
    LAST_12_MONTHS = "last12months"
    THIS_YEAR = "thisyear"
    LAST_YEAR = "lastyear"
    ALL_TIME = "alltime"


@dataclass(frozen=True)
class ExportedReport:
    """A rendered report ready to be streamed as a download."""

    content: str
    media_type: str
    filename: str
