# backend/portfolio_tracker/services/recommendations/types.py
"""
Data types for the recommendation heuristics.

Inputs are explicit records with optional fields instead of loosely typed
quote dictionaries, and every recommendation is one of three tagged
variants:

    Recommendation = BuyRecommendation | SellRecommendation | DiversifyRecommendation

Architecture:
    - StockSignals: Per-holding input (price, valuation, growth, trend)
    - *Recommendation: Output variants, each with a `kind` tag
    - SectorAllocation / RebalanceAction: Allocation analysis rows
    - PortfolioAnalysis: Combined result
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Literal, Union


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TradeAction(str, Enum):
    BUY = "buy"
    SELL = "sell"


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class StockSignals:
    """
    Everything the rules look at for one holding.

    Attributes:
        symbol: Ticker
        current_price: Latest price
        pe_ratio: Price/earnings ratio
        earnings_growth: Earnings growth in percent
        roic: Return on invested capital in percent
        moving_average_50_day: 50-day moving average of closes
        sector: Sector name
        value: Current market value of the holding (None when not owned
            or not quoted)
        quantity: Shares held
    """
    symbol: str
    current_price: Decimal | None = None
    pe_ratio: Decimal | None = None
    earnings_growth: Decimal | None = None
    roic: Decimal | None = None
    moving_average_50_day: Decimal | None = None
    sector: str | None = None
    value: Decimal | None = None
    quantity: Decimal = Decimal("0")


# =============================================================================
# RECOMMENDATION VARIANTS
# =============================================================================

@dataclass(frozen=True)
class BuyRecommendation:
    symbol: str
    confidence: int
    reasoning: list[str]
    priority: Priority = Priority.HIGH
    kind: Literal["buy"] = "buy"

    @property
    def title(self) -> str:
        return "Strong Buy Recommendation"

    @property
    def description(self) -> str:
        return f"{self.symbol} shows strong technical momentum and positive fundamentals"


@dataclass(frozen=True)
class SellRecommendation:
    symbol: str
    confidence: int
    reasoning: list[str]
    priority: Priority = Priority.MEDIUM
    kind: Literal["sell"] = "sell"

    @property
    def title(self) -> str:
        return "Consider Reducing Position"

    @property
    def description(self) -> str:
        return f"{self.symbol} showing signs of overvaluation or technical weakness"


@dataclass(frozen=True)
class DiversifyRecommendation:
    """Raised when one sector holds too much of the portfolio's value."""
    sector: str
    sector_percent: Decimal
    confidence: int
    priority: Priority = Priority.HIGH
    kind: Literal["diversify"] = "diversify"

    @property
    def symbol(self) -> None:
        return None

    @property
    def title(self) -> str:
        return "Sector Concentration Alert"

    @property
    def description(self) -> str:
        return (
            f"Portfolio is heavily concentrated in {self.sector} sector "
            f"({self.sector_percent:.1f}%)"
        )

    @property
    def reasoning(self) -> list[str]:
        return [
            f"{self.sector} sector represents {self.sector_percent:.1f}% of portfolio",
            "High sector concentration increases risk",
            "Consider diversifying into other sectors",
        ]


Recommendation = Union[BuyRecommendation, SellRecommendation, DiversifyRecommendation]


# =============================================================================
# ALLOCATION TYPES
# =============================================================================

@dataclass(frozen=True)
class SectorAllocation:
    sector: str
    percent: Decimal
    recommended_percent: Decimal


@dataclass(frozen=True)
class RebalanceAction:
    """
    Move a holding toward equal weight.

    Attributes:
        quantity: Shares to trade, rounded to whole shares
    """
    symbol: str
    current_percent: Decimal
    target_percent: Decimal
    action: TradeAction
    quantity: Decimal

    @property
    def reason(self) -> str:
        return (
            f"Current allocation ({self.current_percent:.1f}%) differs from "
            f"target ({self.target_percent:.1f}%)"
        )


@dataclass(frozen=True)
class PortfolioAnalysis:
    recommendations: list[Recommendation] = field(default_factory=list)
    sector_allocation: list[SectorAllocation] = field(default_factory=list)
    rebalancing: list[RebalanceAction] = field(default_factory=list)
    risk_score: int = 0
    diversification_score: int = 0
