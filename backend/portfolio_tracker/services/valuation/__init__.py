# backend/portfolio_tracker/services/valuation/__init__.py
"""Position valuation: holding variants and pure calculators."""

from portfolio_tracker.services.valuation.calculators import (
    valuate,
    valuate_position,
    weighted_average_cost,
)
from portfolio_tracker.services.valuation.types import (
    Holding,
    OwnedHolding,
    WatchedHolding,
    PositionValuation,
    ValuedHolding,
    holding_from_position,
)

__all__ = [
    "valuate",
    "valuate_position",
    "weighted_average_cost",
    "Holding",
    "OwnedHolding",
    "WatchedHolding",
    "PositionValuation",
    "ValuedHolding",
    "holding_from_position",
]
