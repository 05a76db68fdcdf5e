# backend/portfolio_tracker/services/analytics/__init__.py
"""Portfolio-level performance figures and the summary service."""

from portfolio_tracker.services.analytics.performance import (
    PortfolioSummary,
    TimeBasedReturns,
    annualized_return,
    summarize,
    time_based_returns,
    weighted_holding_years,
    window_return,
)
from portfolio_tracker.services.analytics.service import (
    EnrichedPosition,
    PortfolioSummaryService,
)

__all__ = [
    "PortfolioSummary",
    "TimeBasedReturns",
    "annualized_return",
    "summarize",
    "time_based_returns",
    "weighted_holding_years",
    "window_return",
    "EnrichedPosition",
    "PortfolioSummaryService",
]
