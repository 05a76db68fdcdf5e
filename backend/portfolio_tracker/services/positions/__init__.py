# backend/portfolio_tracker/services/positions/__init__.py
"""Positions, buy/sell transactions and per-symbol trade history."""

from portfolio_tracker.services.positions.history import TradeSummary, summarize_trades
from portfolio_tracker.services.positions.service import (
    BulkAddResult,
    PositionService,
    StockItem,
)

__all__ = [
    "TradeSummary",
    "summarize_trades",
    "BulkAddResult",
    "PositionService",
    "StockItem",
]
