# backend/portfolio_tracker/routers/positions.py
"""
Position endpoints.

- GET  /positions               Positions with quotes and valuations
- POST /positions               Add a stock (quantity 0 = watch only)
- POST /positions/bulk          Add up to 100 stocks
- GET  /positions/summary       Portfolio summary
- GET/PATCH/DELETE /positions/{id}
- POST /positions/{id}/sell     Sell shares out of a position
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import (
    get_position_service,
    get_summary_service,
    get_user,
)
from portfolio_tracker.middleware.rate_limit import (
    limiter,
    RATE_LIMIT_MARKET_DATA,
    RATE_LIMIT_WRITE,
)
from portfolio_tracker.models import Position, Transaction, User
from portfolio_tracker.schemas.positions import (
    BulkAddResponse,
    BulkFailure,
    BulkPositionCreate,
    EnrichedPositionResponse,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    SellRequest,
)
from portfolio_tracker.schemas.summary import PortfolioSummaryResponse
from portfolio_tracker.schemas.transactions import TransactionResponse
from portfolio_tracker.services.analytics.performance import PortfolioSummary
from portfolio_tracker.services.analytics.service import EnrichedPosition, PortfolioSummaryService
from portfolio_tracker.services.positions.service import PositionService, StockItem

router = APIRouter(
    prefix="/positions",
    tags=["Positions"],
)


# =============================================================================
# MAPPERS
# =============================================================================

def _map_enriched(enriched: EnrichedPosition) -> EnrichedPositionResponse:
    base = PositionResponse.model_validate(enriched.position)
    quote = enriched.valued.quote
    valuation = enriched.valued.valuation
    return EnrichedPositionResponse(
        **base.model_dump(),
        current_price=quote.current_price if quote else None,
        day_change=quote.day_change if quote else None,
        day_change_percent=quote.day_change_percent if quote else None,
        is_synthetic_quote=quote.is_synthetic if quote else False,
        current_value=valuation.current_value,
        cost_basis=valuation.cost_basis,
        gain_loss=valuation.gain_loss,
        gain_loss_percent=valuation.gain_loss_percent,
    )


def _to_item(payload: PositionCreate) -> StockItem:
    return StockItem(
        symbol=payload.symbol,
        quantity=payload.quantity,
        purchase_price=payload.purchase_price,
        purchase_date=payload.purchase_date,
        list_id=payload.list_id,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/",
    response_model=list[EnrichedPositionResponse],
    summary="List positions with market data",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def list_positions(
        request: Request,  # Required for rate limiting
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0, description="Only this list"),
        db: Session = Depends(get_db),
        service: PortfolioSummaryService = Depends(get_summary_service),
) -> list[EnrichedPositionResponse]:
    """Newest first. Valuation fields are null for watch-only or unquoted positions."""
    return [_map_enriched(e) for e in service.enriched_positions(db, user.id, list_id)]


@router.post(
    "/",
    response_model=PositionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a stock",
)
@limiter.limit(RATE_LIMIT_WRITE)
def add_position(
        request: Request,  # Required for rate limiting
        payload: PositionCreate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Position:
    """
    The symbol is checked against market data first.

    Raises **400** for unknown symbols and **409** if the symbol is
    already tracked in the list.
    """
    return service.add_stock(db, user.id, _to_item(payload))


@router.post(
    "/bulk",
    response_model=BulkAddResponse,
    summary="Add several stocks",
)
@limiter.limit(RATE_LIMIT_WRITE)
def bulk_add_positions(
        request: Request,  # Required for rate limiting
        payload: BulkPositionCreate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> BulkAddResponse:
    """Each item succeeds or fails on its own."""
    result = service.bulk_add(db, user.id, [_to_item(item) for item in payload.items])
    return BulkAddResponse(
        successful=[PositionResponse.model_validate(p) for p in result.successful],
        failed=[BulkFailure(symbol=item.symbol, error=error) for item, error in result.failed],
    )


@router.get(
    "/summary",
    response_model=PortfolioSummaryResponse,
    summary="Portfolio summary",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_portfolio_summary(
        request: Request,  # Required for rate limiting
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0, description="Only this list"),
        db: Session = Depends(get_db),
        service: PortfolioSummaryService = Depends(get_summary_service),
) -> PortfolioSummary:
    """
    Total value, gain/loss over net cash invested, annualized return and
    6M/1Y/3Y returns.

    item_count includes watch-only positions; the money figures do not.
    """
    return service.get_summary(db, user.id, list_id)


@router.get("/{position_id}", response_model=PositionResponse, summary="Get a position")
def get_position(
        position_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Position:
    return service.get_position(db, user.id, position_id)


@router.patch("/{position_id}", response_model=PositionResponse, summary="Update a position")
def update_position(
        position_id: int,
        payload: PositionUpdate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Position:
    return service.update_position(
        db,
        user.id,
        position_id,
        quantity=payload.quantity,
        purchase_price=payload.purchase_price,
        purchase_date=payload.purchase_date,
        list_id=payload.list_id,
    )


@router.delete(
    "/{position_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Stop tracking a position",
)
def delete_position(
        position_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Response:
    """Transactions of the position are kept."""
    service.delete_position(db, user.id, position_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{position_id}/sell",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sell shares",
)
@limiter.limit(RATE_LIMIT_WRITE)
def sell_position(
        request: Request,  # Required for rate limiting
        position_id: int,
        payload: SellRequest,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: PositionService = Depends(get_position_service),
) -> Transaction:
    """
    Selling every share closes (deletes) the position.

    Raises **400** with requested/available quantities when selling more
    than is held.
    """
    return service.apply_sell(
        db,
        user.id,
        position_id,
        quantity=payload.quantity,
        price=payload.price,
        date=payload.date,
        fees=payload.fees,
        notes=payload.notes,
    )
