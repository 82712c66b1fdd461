# backend/holdings_ledger/services/analytics/__init__.py
"""
Analytics Package.

Per-holding performance and grouping calculators used by the dashboard and
report composers:
- PerformanceRanker: gain/loss, annualized return, ranked views
- DistributionCalculator: category/status breakdowns and size buckets

Usage:
    from holdings_ledger.services.analytics import PerformanceRanker, RankDimension, RankDirection

    top = PerformanceRanker().rank(
        holdings, RankDimension.PERCENTAGE, RankDirection.TOP, 5, as_of=date.today()
    )
"""

from holdings_ledger.services.analytics.distribution import DistributionCalculator, color_for, share_of
from holdings_ledger.services.analytics.ranking import PerformanceRanker
from holdings_ledger.services.analytics.types import (
    CategoryPerformance,
    CategoryTotals,
    DistributionBucket,
    DistributionGroup,
    HoldingPerformance,
    RankDimension,
    RankDirection,
    RankedHolding,
    SizeBucket,
)

__all__ = [
    "PerformanceRanker",
    "DistributionCalculator",
    "color_for",
    "share_of",
    "HoldingPerformance",
    "RankedHolding",
    "CategoryPerformance",
    "CategoryTotals",
    "DistributionBucket",
    "DistributionGroup",
    "SizeBucket",
    "RankDimension",
    "RankDirection",
]
