# backend/portfolio_tracker/services/recommendations/__init__.py
"""Rule-based buy/sell/diversify recommendations."""

from portfolio_tracker.services.recommendations.service import (
    RecommendationService,
    analyze,
    signals_from_position,
)
from portfolio_tracker.services.recommendations.types import (
    BuyRecommendation,
    DiversifyRecommendation,
    PortfolioAnalysis,
    Priority,
    RebalanceAction,
    Recommendation,
    SectorAllocation,
    SellRecommendation,
    StockSignals,
    TradeAction,
)

__all__ = [
    "RecommendationService",
    "analyze",
    "signals_from_position",
    "BuyRecommendation",
    "DiversifyRecommendation",
    "PortfolioAnalysis",
    "Priority",
    "RebalanceAction",
    "Recommendation",
    "SectorAllocation",
    "SellRecommendation",
    "StockSignals",
    "TradeAction",
]
