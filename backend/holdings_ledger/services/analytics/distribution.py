# backend/holdings_ledger/services/analytics/distribution.py
"""
Distribution breakdowns of holdings.

- distribution(): group by category or status with value share and color
- size_distribution(): fixed current-value ranges

Percentages are unrounded, so a category distribution sums to exactly 100
whenever the grand total is positive.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from holdings_ledger.models import HoldingCategory, HoldingStatus
from holdings_ledger.services.analytics.types import DistributionBucket, DistributionGroup, SizeBucket
from holdings_ledger.services.constants import (
    CATEGORY_COLORS,
    DEFAULT_COLOR,
    HUNDRED,
    SIZE_BUCKETS,
    STATUS_COLORS,
    ZERO,
)
from holdings_ledger.services.protocols import HoldingRecord

logger = logging.getLogger(__name__)


def color_for(key: HoldingCategory | HoldingStatus) -> str:
    """Display color of a category or status; DEFAULT_COLOR if unmapped."""
    if isinstance(key, HoldingCategory):
        return CATEGORY_COLORS.get(key, DEFAULT_COLOR)
    return STATUS_COLORS.get(key, DEFAULT_COLOR)


def share_of(part: Decimal, total: Decimal) -> Decimal:
    """part / total * 100, 0 when total is 0."""
    if total <= ZERO:
        return ZERO
    return part / total * HUNDRED


class DistributionCalculator:
    """Stateless grouping of holdings into display buckets."""

    def distribution(
            self,
            holdings: Sequence[HoldingRecord],
            group_by: DistributionGroup,
            active_only: bool = False,
    ) -> list[DistributionBucket]:
        """
        Count, total value and value share per group.

        Args:
            holdings: Holdings to group; rows flagged is_deleted are skipped
            group_by: CATEGORY or STATUS
            active_only: Keep only ACTIVE holdings (asset allocation)

        Returns:
            Buckets ordered by total value descending, then name
        """
        included = [
            h for h in holdings
            if not getattr(h, "is_deleted", False)
            and (not active_only or h.status == HoldingStatus.ACTIVE)
        ]

        grouped: dict[HoldingCategory | HoldingStatus, list[HoldingRecord]] = defaultdict(list)
        for holding in included:
            key = holding.category if group_by == DistributionGroup.CATEGORY else holding.status
            grouped[key].append(holding)

        grand_total = sum((h.current_value for h in included), ZERO)

        buckets = []
        for key, members in grouped.items():
            total_value = sum((h.current_value for h in members), ZERO)
            buckets.append(DistributionBucket(
                key=key,
                name=key.value,
                count=len(members),
                total_value=total_value,
                percentage=share_of(total_value, grand_total),
                color=color_for(key),
            ))

        buckets.sort(key=lambda b: (-b.total_value, b.name))
        return buckets

    def size_distribution(self, holdings: Sequence[HoldingRecord]) -> list[SizeBucket]:
        """
        Count and total value per fixed value range, smallest range first.

        Every range is reported, empty ones with zero count.
        """
        included = [h for h in holdings if not getattr(h, "is_deleted", False)]

        buckets = []
        for label, lower, upper in SIZE_BUCKETS:
            members = [
                h for h in included
                if h.current_value >= lower and (upper is None or h.current_value < upper)
            ]
            buckets.append(SizeBucket(
                label=label,
                lower_bound=lower,
                upper_bound=upper,
                count=len(members),
                total_value=sum((h.current_value for h in members), ZERO),
            ))
        return buckets
