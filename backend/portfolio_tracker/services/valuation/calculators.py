# backend/portfolio_tracker/services/valuation/calculators.py
"""
Pure calculators for position valuation and cost basis.

No database access and no market data fetching: every input is passed in,
which keeps these functions trivially testable.

    valuate(holding, quote)                 -> PositionValuation
    weighted_average_cost(q1, p1, q2, p2)   -> Decimal

Money results are rounded to cents; percentages to two decimals, as whole
percents (16.67 means 16.67%).
"""

from decimal import Decimal, ROUND_HALF_UP

from portfolio_tracker.models import Position
from portfolio_tracker.services.constants import (
    MONEY_QUANTUM,
    PERCENT_QUANTUM,
    STORAGE_QUANTUM,
)
from portfolio_tracker.services.market_data.types import MarketQuote
from portfolio_tracker.services.valuation.types import (
    Holding,
    OwnedHolding,
    PositionValuation,
    ValuedHolding,
    holding_from_position,
)

_HUNDRED = Decimal("100")


def valuate(holding: Holding, quote: MarketQuote | None) -> PositionValuation:
    """
    Value a holding at the quote's current price.

    Watched holdings and missing quotes produce an all-None valuation.
    A zero cost basis yields a 0% gain rather than a division error.

    Args:
        holding: Owned or watched holding
        quote: Current quote for the holding's symbol, if any

    Returns:
        PositionValuation
    """
    if not isinstance(holding, OwnedHolding) or quote is None:
        return PositionValuation()

    current_value = quote.current_price * holding.quantity
    cost = holding.cost_basis
    gain_loss = current_value - cost

    if cost > 0:
        gain_loss_percent = (gain_loss / cost * _HUNDRED).quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
    else:
        gain_loss_percent = Decimal("0")

    return PositionValuation(
        current_value=current_value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
        cost_basis=cost.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
        gain_loss=gain_loss.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
        gain_loss_percent=gain_loss_percent,
    )


def valuate_position(position: Position, quote: MarketQuote | None) -> ValuedHolding:
    """Classify a stored position and value it in one step."""
    holding = holding_from_position(position)
    return ValuedHolding(holding=holding, quote=quote, valuation=valuate(holding, quote))


def weighted_average_cost(
        held_quantity: Decimal,
        held_average: Decimal,
        added_quantity: Decimal,
        added_price: Decimal,
) -> Decimal:
    """
    Average cost after adding shares to a holding.

        (held_qty * held_avg + added_qty * added_price) / (held_qty + added_qty)

    Kept at storage precision (8 decimals) so repeated buys do not drift.

    Raises:
        ValueError: If the combined quantity is not positive
    """
    total_quantity = held_quantity + added_quantity
    if total_quantity <= 0:
        raise ValueError("Combined quantity must be positive")

    total_cost = held_quantity * held_average + added_quantity * added_price
    return (total_cost / total_quantity).quantize(STORAGE_QUANTUM, rounding=ROUND_HALF_UP)
