# backend/portfolio_tracker/routers/transactions.py
"""
Transaction endpoints.

Recording a buy opens or adds to the (user, symbol, list) position;
recording a sell reduces it. Transactions are never edited or deleted.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_position_service, get_user
from portfolio_tracker.middleware.rate_limit import (
    limiter,
    RATE_LIMIT_MARKET_DATA,
    RATE_LIMIT_WRITE,
)
from portfolio_tracker.models import Transaction, User
from portfolio_tracker.schemas.transactions import (
    TradeSummaryResponse,
    TransactionCreate,
    TransactionResponse,
)
from portfolio_tracker.services.positions.history import TradeSummary
from portfolio_tracker.services.positions.service import PositionService

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
)


@router.get("/", response_model=list[TransactionResponse], summary="List transactions")
def list_transactions(
        user: User = Depends(get_user),
        symbol: str | None = Query(default=None, max_length=10),
        list_id: int | None = Query(default=None, gt=0),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> list[Transaction]:
    """Newest first."""
    return service.list_transactions(db, user.id, symbol=symbol, list_id=list_id)


@router.post(
    "/",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a buy or sell",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_transaction(
        request: Request,  # Required for rate limiting
        payload: TransactionCreate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Transaction:
    """
    Raises **404** when selling a symbol with no position in the list and
    **400** when selling more shares than are held.
    """
    return service.record_transaction(
        db,
        user.id,
        symbol=payload.symbol,
        transaction_type=payload.transaction_type,
        quantity=payload.quantity,
        price=payload.price,
        date=payload.date,
        list_id=payload.list_id,
        fees=payload.fees,
        notes=payload.notes,
    )


@router.get(
    "/summary/{symbol}",
    response_model=TradeSummaryResponse,
    summary="Realized and unrealized results for a symbol",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_trade_summary(
        request: Request,  # Required for rate limiting
        symbol: str,
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> TradeSummary:
    """Unrealized figures are null when no current price is available."""
    return service.position_summary(db, user.id, symbol, list_id=list_id)
