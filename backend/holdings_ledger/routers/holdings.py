# backend/holdings_ledger/routers/holdings.py
"""
Holding management endpoints.

A holding is one position: its principal (initial_amount), its purchase
date and a ledger of Buy / Sell / Update transactions. current_value is
never edited here; it is recomputed by the transactions endpoints.

All endpoints require authentication. Users can only see and change their
own holdings; deleted holdings disappear from every view.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from holdings_ledger.database import get_db
from holdings_ledger.dependencies import get_current_user, get_holding_service
from holdings_ledger.middleware.rate_limit import RATE_LIMIT_WRITE, limiter
from holdings_ledger.models import Holding, User
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
from holdings_ledger.services.constants import MAX_PAGE_SIZE
from holdings_ledger.services.ledger import HoldingService

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/holdings",
    tags=["Holdings"],
)

_COMPUTED_FIELDS = {"gain_loss", "gain_loss_percentage"}


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/",
    response_model=HoldingListResponse,
    summary="List holdings",
)
def list_holdings(
        filters: Annotated[HoldingFilterParams, Query()],
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> HoldingListResponse:
    """
    List the current user's holdings.

    - **status** / **category**: case-insensitive ("realestate", "OnHold")
    - **search**: substring of the name
    - **min_value** / **max_value**: bounds on current value
    - **sort_by**: amount, currentvalue, gainloss, purchasedate, name
    """
    holdings, total = service.list_holdings(db, current_user.id, filters, skip, limit)

    return HoldingListResponse(
        items=[HoldingResponse.model_validate(h) for h in holdings],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/stats",
    response_model=HoldingStatsResponse,
    summary="Holding counts and totals",
)
def holding_stats(
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> HoldingStatsResponse:
    return HoldingStatsResponse.model_validate(service.holding_stats(db, current_user.id))


@router.post(
    "/",
    response_model=HoldingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a holding",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_holding(
        request: Request,
        holding: HoldingCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> Holding:
    """
    Open a new holding.

    current_value starts equal to **initial_amount**. **purchase_date**
    must not be in the future.
    """
    return service.create_holding(db, current_user.id, holding)


@router.get(
    "/{holding_id}",
    response_model=HoldingDetailResponse,
    summary="Get a holding with its ledger totals",
)
def get_holding(
        holding_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> HoldingDetailResponse:
    holding = service.get_holding_for_owner(db, holding_id, current_user.id)
    totals = service.transaction_totals(db, holding)

    base = HoldingResponse.model_validate(holding).model_dump(exclude=_COMPUTED_FIELDS)
    return HoldingDetailResponse(**base, transactions=TransactionTotals.model_validate(totals))


@router.patch(
    "/{holding_id}",
    response_model=HoldingResponse,
    summary="Update descriptive fields of a holding",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_holding(
        request: Request,
        holding_id: int,
        changes: HoldingUpdate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> Holding:
    """
    Partial update. Only fields present in the body are changed.

    Value fields are ledger-driven and cannot be edited.
    """
    return service.update_holding(db, holding_id, current_user.id, changes)


@router.delete(
    "/{holding_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a holding",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_holding(
        request: Request,
        holding_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: HoldingService = Depends(get_holding_service),
) -> None:
    """
    Soft-delete a holding. Its ledger is kept but no longer reported.
    """
    service.delete_holding(db, holding_id, current_user.id)
    logger.info(f"Holding {holding_id} deleted by user {current_user.id}")
