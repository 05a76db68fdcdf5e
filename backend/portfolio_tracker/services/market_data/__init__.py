# backend/portfolio_tracker/services/market_data/__init__.py
"""
Market data: provider interface, Yahoo Finance implementation, TTL cache
and the QuoteService that assembles cached, enriched quotes.
"""

from portfolio_tracker.services.market_data.base import (
    MarketDataProvider,
    LivePrice,
    Fundamentals,
    ClosePrice,
)
from portfolio_tracker.services.market_data.cache import TTLCache
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.market_data.types import MarketQuote, PriceChange, ReturnWindow
from portfolio_tracker.services.market_data.yahoo import YahooFinanceProvider

__all__ = [
    "MarketDataProvider",
    "LivePrice",
    "Fundamentals",
    "ClosePrice",
    "TTLCache",
    "QuoteService",
    "MarketQuote",
    "PriceChange",
    "ReturnWindow",
    "YahooFinanceProvider",
]
