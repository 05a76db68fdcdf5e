# backend/portfolio_tracker/routers/quotes.py
"""Market quote endpoint."""

from fastapi import APIRouter, Depends, Request

from portfolio_tracker.dependencies import get_quote_service
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_MARKET_DATA
from portfolio_tracker.schemas.quotes import QuoteResponse
from portfolio_tracker.schemas.validators import validate_symbol
from portfolio_tracker.services.exceptions import ValidationError
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.market_data.types import MarketQuote

router = APIRouter(
    prefix="/quotes",
    tags=["Market Data"],
)


@router.get(
    "/{symbol}",
    response_model=QuoteResponse,
    summary="Get an enriched quote",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_quote(
        request: Request,  # Required for rate limiting
        symbol: str,
        service: QuoteService = Depends(get_quote_service),
) -> MarketQuote:
    """
    Cached for 5 minutes. `is_synthetic` is true when the provider was
    unreachable and placeholder values were served instead.

    Raises **404** for unknown symbols and **503** when no quote can be
    produced.
    """
    try:
        normalized = validate_symbol(symbol)
    except ValueError as e:
        raise ValidationError(str(e), field="symbol")
    return service.get_quote(normalized)
