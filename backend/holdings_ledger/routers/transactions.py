# backend/holdings_ledger/routers/transactions.py
"""
Transaction (ledger entry) endpoints.

Key concepts:
- Each transaction belongs to ONE holding and is never edited or deleted
- Buy adds its amount, Sell subtracts it, Update sets the value outright
- Posting recomputes the holding's current value in the same commit
- A Sell larger than the current value is rejected (422) and nothing changes
- So is any entry whose replay would leave the value below zero

All endpoints require authentication. Users can only post to and read
ledgers of holdings they own.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from holdings_ledger.database import get_db
from holdings_ledger.dependencies import get_current_user, get_transaction_service
from holdings_ledger.middleware.rate_limit import RATE_LIMIT_WRITE, limiter
from holdings_ledger.models import Transaction, User
from holdings_ledger.schemas.holdings import HoldingResponse
from holdings_ledger.schemas.pagination import PaginationMeta
from holdings_ledger.schemas.transactions import (
    TransactionCreate,
    TransactionCreatedResponse,
    TransactionFilterParams,
    TransactionListResponse,
    TransactionPreviewResponse,
    TransactionResponse,
)
from holdings_ledger.services.constants import DEFAULT_RECENT_TRANSACTIONS, MAX_PAGE_SIZE
from holdings_ledger.services.ledger import TransactionService

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/",
    response_model=TransactionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a transaction",
    response_description="The new entry and the holding with its recomputed value",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_transaction(
        request: Request,
        transaction: TransactionCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> TransactionCreatedResponse:
    """
    Append an entry to a holding's ledger.

    - **transaction_type**: Buy, Sell or Update (any casing)
    - **quantity** x **price_per_unit** = amount
    - **transaction_date**: not in the future; may be back-dated

    Errors:
    - 400: future date, or an Update with non-positive quantity/price
    - 422: Sell larger than the holding's current value, or an entry whose
      replay would leave the value below zero
    """
    posted = service.create_transaction(
        db,
        current_user.id,
        transaction.holding_id,
        transaction.transaction_type,
        transaction.quantity,
        transaction.price_per_unit,
        transaction.transaction_date,
        notes=transaction.notes,
    )

    return TransactionCreatedResponse(
        transaction=TransactionResponse.model_validate(posted.transaction),
        holding=HoldingResponse.model_validate(posted.holding),
    )


@router.post(
    "/preview",
    response_model=TransactionPreviewResponse,
    summary="Preview the effect of a transaction",
)
def preview_transaction(
        transaction: TransactionCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> TransactionPreviewResponse:
    """
    Compute the holding value the transaction would produce, without
    writing. Rule violations come back as is_valid=false with a message.
    """
    preview = service.preview_transaction(
        db,
        current_user.id,
        transaction.holding_id,
        transaction.transaction_type,
        transaction.quantity,
        transaction.price_per_unit,
        transaction.transaction_date,
    )
    return TransactionPreviewResponse.model_validate(preview)


@router.get(
    "/",
    response_model=TransactionListResponse,
    summary="List transactions across all holdings",
)
def list_transactions(
        filters: Annotated[TransactionFilterParams, Query()],
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    """
    The current user's ledger, newest first by default.

    - **holding_id**: one holding only
    - **transaction_type**: Buy, Sell or Update (any casing)
    - **start_date** / **end_date**: inclusive transaction date bounds
    - **search**: substring of the holding name
    - **sort_by**: date or amount
    """
    transactions, total = service.list_for_owner(db, current_user.id, filters, skip, limit)

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/recent",
    response_model=list[TransactionResponse],
    summary="Most recently recorded transactions",
)
def recent_transactions(
        count: int = Query(default=DEFAULT_RECENT_TRANSACTIONS, ge=1, le=MAX_PAGE_SIZE),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> list[Transaction]:
    return service.recent_for_owner(db, current_user.id, count)


@router.get(
    "/holding/{holding_id}",
    response_model=TransactionListResponse,
    summary="List a holding's transactions",
)
def list_holding_transactions(
        holding_id: int,
        skip: int = Query(default=0, ge=0),
        limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    """Newest first."""
    transactions, total = service.list_for_holding(db, current_user.id, holding_id, skip, limit)

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a transaction",
)
def get_transaction(
        transaction_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return service.get_transaction(db, transaction_id, current_user.id)
