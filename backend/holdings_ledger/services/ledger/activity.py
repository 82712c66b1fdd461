# backend/holdings_ledger/services/ledger/activity.py
"""
Activity (audit) records for successful mutations.

Delivery is fire-and-forget: record_activity() never raises, so a broken
sink cannot fail or roll back the mutation that has already committed.
"""

import logging
from typing import Any

from holdings_ledger.services.protocols import ActivityLogger
from holdings_ledger.utils.context import get_correlation_id

logger = logging.getLogger(__name__)

ACTIVITY_LOGGER_NAME = "holdings_ledger.activity"


class LoggingActivityLogger:
    """Writes one INFO record per activity to the `holdings_ledger.activity` logger."""

    def __init__(self, logger_name: str = ACTIVITY_LOGGER_NAME) -> None:
        self._logger = logging.getLogger(logger_name)

    def record(self, user_id: int, action: str, entity: str, entity_id: int, details: dict[str, Any]) -> None:
        self._logger.info(
            f"{action} {entity} {entity_id} by user {user_id}",
            extra={
                "activity": {
                    "user_id": user_id,
                    "action": action,
                    "entity": entity,
                    "entity_id": entity_id,
                    "details": details,
                    "correlation_id": get_correlation_id(),
                }
            },
        )


def record_activity(
        sink: ActivityLogger | None,
        user_id: int,
        action: str,
        entity: str,
        entity_id: int,
        details: dict[str, Any] | None = None,
) -> None:
    """Hand an activity to the sink; failures are logged and dropped."""
    if sink is None:
        return
    try:
        sink.record(user_id, action, entity, entity_id, details or {})
    except Exception as e:
        logger.warning(f"Activity sink failed for {action} {entity} {entity_id}: {e}")
