# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- A configurable mock market data provider
- Sample data factories (users, lists, positions, close series)
"""

import os

# Settings are read at import time; the test environment must be set first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio_tracker.models import Base, PortfolioList, Position, User
from portfolio_tracker.services.exceptions import TickerNotFoundError
from portfolio_tracker.services.market_data.base import (
    ClosePrice,
    Fundamentals,
    LivePrice,
    MarketDataProvider,
)
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.positions.service import PositionService


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# MOCK MARKET DATA PROVIDER
# =============================================================================

class MockMarketDataProvider(MarketDataProvider):
    """
    In-memory MarketDataProvider for tests.

    Unknown symbols raise TickerNotFoundError for prices and fundamentals
    and have no history. Errors can be injected per symbol and per call
    kind ("price", "fundamentals", "closes").
    """

    def __init__(self):
        self._prices: dict[str, LivePrice] = {}
        self._fundamentals: dict[str, Fundamentals] = {}
        self._closes: dict[tuple[str, int | None], list[ClosePrice]] = {}
        self._errors: dict[tuple[str, str], Exception] = {}
        self.calls: dict[str, int] = {"price": 0, "fundamentals": 0, "closes": 0}

    @property
    def name(self) -> str:
        return "mock"

    def add_price(
            self,
            symbol: str,
            price: Decimal | str,
            previous_close: Decimal | str | None = None,
            **kwargs,
    ) -> None:
        """Configure the live price of a symbol."""
        self._prices[symbol.upper()] = LivePrice(
            symbol=symbol.upper(),
            current_price=Decimal(str(price)),
            previous_close=Decimal(str(previous_close)) if previous_close is not None else None,
            **kwargs,
        )

    def add_fundamentals(self, symbol: str, **kwargs) -> None:
        """Configure fundamentals; values are passed straight to Fundamentals."""
        self._fundamentals[symbol.upper()] = Fundamentals(**kwargs)

    def set_closes(
            self,
            symbol: str,
            closes: list[ClosePrice],
            range_days: int | None = None,
    ) -> None:
        """Configure history for one window, or for every window when range_days is None."""
        self._closes[(symbol.upper(), range_days)] = closes

    def add_error(self, symbol: str, error: Exception, kind: str = "price") -> None:
        self._errors[(symbol.upper(), kind)] = error

    def clear_errors(self) -> None:
        self._errors.clear()

    def _raise_if_configured(self, symbol: str, kind: str) -> None:
        error = self._errors.get((symbol, kind))
        if error is not None:
            raise error

    def fetch_live_price(self, symbol: str, timeout: float | None = None) -> LivePrice:
        self.calls["price"] += 1
        symbol = symbol.upper()
        self._raise_if_configured(symbol, "price")
        if symbol not in self._prices:
            raise TickerNotFoundError(symbol=symbol, provider=self.name)
        return self._prices[symbol]

    def fetch_fundamentals(self, symbol: str, timeout: float | None = None) -> Fundamentals:
        self.calls["fundamentals"] += 1
        symbol = symbol.upper()
        self._raise_if_configured(symbol, "fundamentals")
        if symbol not in self._fundamentals:
            raise TickerNotFoundError(symbol=symbol, provider=self.name)
        return self._fundamentals[symbol]

    def fetch_historical_closes(
            self,
            symbol: str,
            range_days: int,
            interval: str = "1d",
            timeout: float | None = None,
    ) -> list[ClosePrice]:
        self.calls["closes"] += 1
        symbol = symbol.upper()
        self._raise_if_configured(symbol, "closes")
        if (symbol, range_days) in self._closes:
            return self._closes[(symbol, range_days)]
        return self._closes.get((symbol, None), [])


@pytest.fixture
def mock_provider() -> MockMarketDataProvider:
    """Create a fresh mock provider for each test."""
    return MockMarketDataProvider()


@pytest.fixture
def quote_service(mock_provider: MockMarketDataProvider) -> QuoteService:
    """QuoteService over the mock provider, synthetic fallback disabled."""
    return QuoteService(provider=mock_provider, allow_synthetic=False)


@pytest.fixture
def position_service(quote_service: QuoteService) -> PositionService:
    return PositionService(quote_service)


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def make_closes(
        count: int,
        start_price: Decimal | str = "100",
        step: Decimal | str = "0",
        end: date | None = None,
        spacing_days: int = 1,
) -> list[ClosePrice]:
    """
    Build an oldest-first close series ending at `end` (default: today).

    Each close is `step` above the previous one.
    """
    end = end or date.today()
    start_price = Decimal(str(start_price))
    step = Decimal(str(step))
    return [
        ClosePrice(
            date=end - timedelta(days=(count - 1 - i) * spacing_days),
            close=start_price + step * i,
        )
        for i in range(count)
    ]


def create_user(
        db: Session,
        email: str = "test@example.com",
        name: str | None = "Test User",
) -> User:
    """Factory function for creating User entities in the database."""
    user = User(email=email, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_list(
        db: Session,
        user: User,
        name: str = "Main",
        is_default: bool = False,
        description: str | None = None,
) -> PortfolioList:
    """Factory function for creating PortfolioList entities in the database."""
    portfolio_list = PortfolioList(
        user_id=user.id,
        name=name,
        description=description,
        is_default=is_default,
    )
    db.add(portfolio_list)
    db.commit()
    db.refresh(portfolio_list)
    return portfolio_list


def create_position(
        db: Session,
        user: User,
        symbol: str = "AAPL",
        quantity: Decimal | str = "10",
        purchase_price: Decimal | str | None = "150",
        purchase_date: date | None = None,
        list_id: int | None = None,
) -> Position:
    """Factory function for creating Position entities directly, bypassing the service."""
    quantity = Decimal(str(quantity))
    position = Position(
        user_id=user.id,
        list_id=list_id,
        symbol=symbol,
        quantity=quantity,
        purchase_price=Decimal(str(purchase_price)) if purchase_price is not None else None,
        purchase_date=purchase_date if purchase_date is not None else (date.today() if quantity > 0 else None),
    )
    db.add(position)
    db.commit()
    db.refresh(position)
    return position


# =============================================================================
# FIXTURE EXPORTS (for convenience imports in tests)
# =============================================================================

@pytest.fixture
def sample_user(db: Session) -> User:
    """Provide a sample User for tests."""
    return create_user(db)


@pytest.fixture
def sample_list(db: Session, sample_user: User) -> PortfolioList:
    """Provide the sample user's default list."""
    return create_list(db, sample_user, name="Main", is_default=True)


# =============================================================================
# API TEST HELPERS
# =============================================================================

def override_app_dependencies(app, db: Session, provider: MarketDataProvider) -> QuoteService:
    """
    Point the app at the test session and a fresh service graph over `provider`.

    The service singletons call each other directly, so every one of them
    that reaches the quote service is overridden, not just get_quote_service.
    Callers clear app.dependency_overrides when done.
    """
    from portfolio_tracker.database import get_db
    from portfolio_tracker.dependencies import (
        get_position_service,
        get_quote_service,
        get_recommendation_service,
        get_summary_service,
    )
    from portfolio_tracker.services.analytics.service import PortfolioSummaryService
    from portfolio_tracker.services.cash_ledger import CashLedgerService
    from portfolio_tracker.services.recommendations.service import RecommendationService

    quotes = QuoteService(provider=provider, allow_synthetic=False)
    positions = PositionService(quotes)
    summary = PortfolioSummaryService(quotes, positions, CashLedgerService())
    recommendations = RecommendationService(summary)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_service] = lambda: quotes
    app.dependency_overrides[get_position_service] = lambda: positions
    app.dependency_overrides[get_summary_service] = lambda: summary
    app.dependency_overrides[get_recommendation_service] = lambda: recommendations
    return quotes
