# backend/portfolio_tracker/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions (see exceptions.py)
- Receive database sessions as parameters (not via Depends)
- Are easily testable via dependency injection

Architecture:
    services/
    ├── __init__.py            # This file - main exports
    ├── exceptions.py          # Domain exceptions
    ├── constants.py           # Business constants and limits
    ├── cash_ledger.py         # Deposits, withdrawals, net cash invested
    ├── lists.py               # Named lists of positions
    ├── users.py               # Minimal user registry
    ├── market_data/           # Providers, TTL cache, QuoteService
    ├── positions/             # Buys, sells, trade history
    ├── valuation/             # Holding variants and valuation math
    ├── analytics/             # Portfolio summary and returns
    └── recommendations/       # Rule-based buy/sell/diversify signals
"""

from portfolio_tracker.services.analytics import PortfolioSummary, PortfolioSummaryService
from portfolio_tracker.services.cash_ledger import CashLedgerService
from portfolio_tracker.services.lists import ListService
from portfolio_tracker.services.market_data import QuoteService, YahooFinanceProvider
from portfolio_tracker.services.positions import PositionService
from portfolio_tracker.services.recommendations import RecommendationService
from portfolio_tracker.services.users import UserService

from portfolio_tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    MarketDataError,
)

__all__ = [
    "PortfolioSummary",
    "PortfolioSummaryService",
    "CashLedgerService",
    "ListService",
    "QuoteService",
    "YahooFinanceProvider",
    "PositionService",
    "RecommendationService",
    "UserService",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "MarketDataError",
]
