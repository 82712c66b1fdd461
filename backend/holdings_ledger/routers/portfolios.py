# backend/holdings_ledger/routers/portfolios.py
"""
Portfolio endpoints.

Portfolios are named groupings of holdings. The first portfolio a user
creates becomes their default. Holdings join a portfolio through the
holdings endpoints (portfolio_id). A portfolio can only be deleted once it
holds no holdings.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from holdings_ledger.database import get_db
from holdings_ledger.dependencies import get_current_user, get_portfolio_service
from holdings_ledger.middleware.rate_limit import RATE_LIMIT_WRITE, limiter
from holdings_ledger.models import Portfolio, User
from holdings_ledger.schemas.portfolios import (
    PortfolioCanDeleteResponse,
    PortfolioCreate,
    PortfolioResponse,
    PortfolioStatsResponse,
    PortfolioSummaryResponse,
    PortfolioUpdate,
)
from holdings_ledger.services.ledger import (
    PortfolioDeleteCheck,
    PortfolioService,
    PortfolioStats,
    PortfolioSummary,
)
from holdings_ledger.services.reports.formatting import round_currency, round_percentage
from holdings_ledger.services.reports.items import distribution_item, performance_item

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolios",
    tags=["Portfolios"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _summary_response(summary: PortfolioSummary) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse(
        portfolio=PortfolioResponse.model_validate(summary.portfolio),
        holding_count=summary.holding_count,
        total_invested=round_currency(summary.total_invested),
        current_value=round_currency(summary.current_value),
    )


def _can_delete_response(check: PortfolioDeleteCheck) -> PortfolioCanDeleteResponse:
    if check.can_delete:
        message = "Portfolio can be deleted"
    else:
        message = f"Portfolio cannot be deleted. It contains {check.holding_count} holding(s)"
    return PortfolioCanDeleteResponse(
        portfolio_id=check.portfolio_id,
        can_delete=check.can_delete,
        holding_count=check.holding_count,
        message=message,
    )


def _stats_response(stats: PortfolioStats) -> PortfolioStatsResponse:
    return PortfolioStatsResponse(
        portfolio_id=stats.portfolio_id,
        portfolio_name=stats.portfolio_name,
        total_invested=round_currency(stats.total_invested),
        current_value=round_currency(stats.current_value),
        total_gain_loss=round_currency(stats.total_gain_loss),
        total_gain_loss_percentage=round_percentage(stats.total_gain_loss_percentage),
        total_holdings=stats.total_holdings,
        active_holdings=stats.active_holdings,
        sold_holdings=stats.sold_holdings,
        on_hold_holdings=stats.on_hold_holdings,
        best_performer=performance_item(stats.best_performer) if stats.best_performer else None,
        worst_performer=performance_item(stats.worst_performer) if stats.worst_performer else None,
        allocation=[distribution_item(b) for b in stats.allocation],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new portfolio",
    response_description="The created portfolio",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_portfolio(
        request: Request,
        portfolio: PortfolioCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> Portfolio:
    """
    Create a new portfolio for the current user.

    - **name**: 3 to 100 characters
    - **description**: optional, up to 500 characters
    """
    return service.create_portfolio(db, current_user.id, portfolio)


@router.get(
    "/",
    response_model=list[PortfolioSummaryResponse],
    summary="List portfolios with totals",
)
def list_portfolios(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> list[PortfolioSummaryResponse]:
    return [_summary_response(s) for s in service.list_portfolios(db, current_user.id)]


@router.get(
    "/{portfolio_id}/stats",
    response_model=PortfolioStatsResponse,
    summary="Portfolio statistics",
)
def portfolio_stats(
        portfolio_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioStatsResponse:
    """
    Totals, status counts, best and worst holding by gain percentage and
    allocation by category.
    """
    return _stats_response(service.portfolio_stats(db, portfolio_id, current_user.id))


@router.get(
    "/{portfolio_id}/can-delete",
    response_model=PortfolioCanDeleteResponse,
    summary="Check whether a portfolio can be deleted",
)
def can_delete_portfolio(
        portfolio_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioCanDeleteResponse:
    return _can_delete_response(service.can_delete_portfolio(db, portfolio_id, current_user.id))


@router.put(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    summary="Rename or re-describe a portfolio",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_portfolio(
        request: Request,
        portfolio_id: int,
        portfolio: PortfolioUpdate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> Portfolio:
    """
    Replace the name and description of a portfolio.

    - **name**: 3 to 100 characters
    - **description**: optional; omitting it clears the description
    """
    return service.update_portfolio(db, portfolio_id, current_user.id, portfolio)


@router.delete(
    "/{portfolio_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an empty portfolio",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_portfolio(
        request: Request,
        portfolio_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: PortfolioService = Depends(get_portfolio_service),
) -> None:
    """
    Soft-delete a portfolio. Refused with 422 while it still holds holdings;
    move or delete them first.
    """
    service.delete_portfolio(db, portfolio_id, current_user.id)
    logger.info(f"Portfolio {portfolio_id} deleted by user {current_user.id}")
