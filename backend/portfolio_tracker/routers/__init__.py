# backend/portfolio_tracker/routers/__init__.py
"""
API routers for the Stock Portfolio Tracker.

Each router handles a specific domain:
- users: Minimal user registry
- lists: Named lists (portfolios / watchlists)
- positions: Holdings, stock adds, sells and the portfolio summary
- transactions: Buy/sell records and per-symbol trade summaries
- cash_flows: Deposits, withdrawals and net cash invested
- quotes: Enriched market quotes
- recommendations: Rule-based signals
"""

from portfolio_tracker.routers.cash_flows import router as cash_flows_router
from portfolio_tracker.routers.lists import router as lists_router
from portfolio_tracker.routers.positions import router as positions_router
from portfolio_tracker.routers.quotes import router as quotes_router
from portfolio_tracker.routers.recommendations import router as recommendations_router
from portfolio_tracker.routers.transactions import router as transactions_router
from portfolio_tracker.routers.users import router as users_router

__all__ = [
    "cash_flows_router",
    "lists_router",
    "positions_router",
    "quotes_router",
    "recommendations_router",
    "transactions_router",
    "users_router",
]
