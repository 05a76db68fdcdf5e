# backend/portfolio_tracker/dependencies.py
"""
Dependency injection module for FastAPI services.

Singleton service instances are shared across all requests so that the
quote and sector P/E caches live for the whole process. They are created
lazily on first use to avoid import-time side effects.

Usage in routers:
    from portfolio_tracker.dependencies import get_position_service, get_user

    @router.post("/")
    def buy(
        user: User = Depends(get_user),
        service: PositionService = Depends(get_position_service),
    ):
        ...
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from portfolio_tracker.config import settings
from portfolio_tracker.database import get_db
from portfolio_tracker.models import User
from portfolio_tracker.services.analytics.service import PortfolioSummaryService
from portfolio_tracker.services.cash_ledger import CashLedgerService
from portfolio_tracker.services.lists import ListService
from portfolio_tracker.services.market_data.base import MarketDataProvider
from portfolio_tracker.services.market_data.cache import TTLCache
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.market_data.yahoo import YahooFinanceProvider
from portfolio_tracker.services.positions.service import PositionService
from portfolio_tracker.services.recommendations.service import RecommendationService
from portfolio_tracker.services.users import UserService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_market_data_provider (no deps)
# 2. get_quote_service (provider)
# 3. get_position_service, get_cash_ledger_service (quote service / none)
# 4. get_summary_service (quotes, positions, ledger)
# 5. get_recommendation_service (summary)


@lru_cache(maxsize=1)
def get_market_data_provider() -> MarketDataProvider:
    logger.debug("Initializing singleton YahooFinanceProvider")
    return YahooFinanceProvider(timeout=settings.price_fetch_timeout_seconds)


@lru_cache(maxsize=1)
def get_quote_service() -> QuoteService:
    """
    Get the singleton QuoteService.

    Holds the process-wide quote cache and sector P/E cache.
    """
    logger.debug("Initializing singleton QuoteService")
    return QuoteService(
        provider=get_market_data_provider(),
        quote_cache=TTLCache(settings.quote_cache_ttl_seconds),
        sector_pe_cache=TTLCache(settings.sector_pe_cache_ttl_seconds),
        allow_synthetic=settings.synthetic_quotes_allowed,
        price_timeout=settings.price_fetch_timeout_seconds,
        fundamentals_timeout=settings.fundamentals_fetch_timeout_seconds,
        peer_timeout=settings.peer_pe_fetch_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_position_service() -> PositionService:
    return PositionService(quote_service=get_quote_service())


@lru_cache(maxsize=1)
def get_cash_ledger_service() -> CashLedgerService:
    return CashLedgerService()


@lru_cache(maxsize=1)
def get_list_service() -> ListService:
    return ListService()


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    return UserService()


@lru_cache(maxsize=1)
def get_summary_service() -> PortfolioSummaryService:
    logger.debug("Initializing singleton PortfolioSummaryService")
    return PortfolioSummaryService(
        quote_service=get_quote_service(),
        position_service=get_position_service(),
        cash_ledger=get_cash_ledger_service(),
    )


@lru_cache(maxsize=1)
def get_recommendation_service() -> RecommendationService:
    return RecommendationService(summary_service=get_summary_service())


# =============================================================================
# REQUEST DEPENDENCIES
# =============================================================================

def get_user(
    user_id: Annotated[int, Query(gt=0, description="Owner of the data")],
    db: Annotated[Session, Depends(get_db)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> User:
    """
    Resolve the `user_id` query parameter to an existing user.

    Raises:
        UserNotFoundError: Mapped to 404 by the app's exception handlers
    """
    return users.get_user(db, user_id)


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

def clear_service_caches() -> None:
    """
    Drop every singleton so the next call builds fresh instances.

    Useful for testing or when you need to reset state.
    """
    get_market_data_provider.cache_clear()
    get_quote_service.cache_clear()
    get_position_service.cache_clear()
    get_cash_ledger_service.cache_clear()
    get_list_service.cache_clear()
    get_user_service.cache_clear()
    get_summary_service.cache_clear()
    get_recommendation_service.cache_clear()
    logger.info("Cleared all service singleton caches")
