# backend/portfolio_tracker/services/valuation/types.py
"""
Value objects for position valuation.

A stored Position overloads quantity == 0 to mean "watch only". The
valuation code does not look at that magic value: positions are first
turned into an explicit Holding variant,

    Holding = OwnedHolding | WatchedHolding

and only OwnedHolding ever takes part in value or gain/loss arithmetic.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union

from portfolio_tracker.models import Position
from portfolio_tracker.services.market_data.types import MarketQuote


@dataclass(frozen=True)
class OwnedHolding:
    """
    Shares actually held.

    Attributes:
        symbol: Ticker
        quantity: Shares held (> 0)
        average_cost: Weighted-average purchase price per share
        purchase_date: Date of the first buy, when known
    """
    symbol: str
    quantity: Decimal
    average_cost: Decimal
    purchase_date: date | None = None

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.average_cost


@dataclass(frozen=True)
class WatchedHolding:
    """A symbol that is tracked without any shares."""
    symbol: str


Holding = Union[OwnedHolding, WatchedHolding]


def holding_from_position(position: Position) -> Holding:
    """Classify a stored position as owned or watched."""
    quantity = position.quantity or Decimal("0")
    if quantity <= 0:
        return WatchedHolding(symbol=position.symbol)
    return OwnedHolding(
        symbol=position.symbol,
        quantity=quantity,
        average_cost=position.purchase_price or Decimal("0"),
        purchase_date=position.purchase_date,
    )


@dataclass(frozen=True)
class PositionValuation:
    """
    Market value of one holding.

    All fields are None for watched holdings and for holdings without a
    quote; a partial valuation never reports 0 in place of "unknown".
    """
    current_value: Decimal | None = None
    cost_basis: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None

    @property
    def is_valued(self) -> bool:
        return self.current_value is not None


@dataclass(frozen=True)
class ValuedHolding:
    """A holding together with the quote and valuation used in a summary."""
    holding: Holding
    quote: MarketQuote | None
    valuation: PositionValuation

    @property
    def is_owned(self) -> bool:
        return isinstance(self.holding, OwnedHolding)
