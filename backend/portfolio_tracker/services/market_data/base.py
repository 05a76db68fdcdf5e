# backend/portfolio_tracker/services/market_data/base.py
"""
Abstract interface for market data providers.

A provider answers three independent questions about a symbol, each its own
network call with its own timeout:

- fetch_live_price: current price, previous close, day-level metadata
- fetch_fundamentals: valuation, growth and balance-sheet figures
- fetch_historical_closes: closing prices over a trailing window

The QuoteService combines them into a MarketQuote and decides what to do
when one of them fails. Providers only report raw data and raise
MarketDataError subclasses; they never substitute estimates.

Retry behaviour lives here so every provider backs off the same way.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TypeVar, Callable, Any

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class LivePrice:
    """
    Current trading snapshot for a symbol.

    Attributes:
        symbol: Upper-case ticker
        current_price: Latest traded price
        previous_close: Prior session close, when the provider reports one
        volume: Latest session volume
        market_cap: Market capitalisation in the quote currency
        week_52_high / week_52_low: Trailing 52-week range
        long_name: Company or fund name
        currency: ISO currency of the prices
    """
    symbol: str
    current_price: Decimal
    previous_close: Decimal | None = None
    volume: int | None = None
    market_cap: Decimal | None = None
    week_52_high: Decimal | None = None
    week_52_low: Decimal | None = None
    long_name: str | None = None
    currency: str | None = None


@dataclass(frozen=True)
class Fundamentals:
    """
    Raw company fundamentals as reported by the provider.

    Ratios such as growth, margins, yields and returns are FRACTIONS here
    (0.12 = 12%); conversion to percent happens when the quote is built.
    Every field is optional because coverage varies wildly by symbol.
    """
    long_name: str | None = None
    sector: str | None = None
    industry: str | None = None

    trailing_pe: Decimal | None = None
    forward_pe: Decimal | None = None
    peg_ratio: Decimal | None = None
    price_to_book: Decimal | None = None
    book_value: Decimal | None = None
    trailing_eps: Decimal | None = None
    forward_eps: Decimal | None = None

    dividend_yield: Decimal | None = None
    payout_ratio: Decimal | None = None
    earnings_growth: Decimal | None = None
    revenue_growth: Decimal | None = None
    return_on_equity: Decimal | None = None
    return_on_assets: Decimal | None = None
    profit_margins: Decimal | None = None
    operating_margins: Decimal | None = None

    market_cap: Decimal | None = None
    average_volume: int | None = None
    week_52_high: Decimal | None = None
    week_52_low: Decimal | None = None

    total_revenue: Decimal | None = None
    total_debt: Decimal | None = None
    total_cash: Decimal | None = None
    free_cashflow: Decimal | None = None
    ebitda: Decimal | None = None
    current_ratio: Decimal | None = None
    quick_ratio: Decimal | None = None
    debt_to_equity: Decimal | None = None

    @property
    def pe_ratio(self) -> Decimal | None:
        """Forward P/E when reported, trailing otherwise."""
        return self.forward_pe if self.forward_pe is not None else self.trailing_pe


@dataclass(frozen=True)
class ClosePrice:
    """One closing price in a historical series."""
    date: date
    close: Decimal


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class MarketDataProvider(ABC):
    """
    Abstract base class for market data providers.

    Subclasses implement the three fetch_* methods and the name property.
    `_execute_with_retry` gives them exponential backoff on transient
    failures; the retry budget is tuned through class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT / RETRY_MAX_WAIT: Backoff bounds in seconds

    Retryable: ProviderUnavailableError, RateLimitError.
    Not retryable: TickerNotFoundError (the symbol will not appear on retry).
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10
    RETRY_MULTIPLIER: int = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier used in logs and error messages (e.g. "yahoo")."""
        pass

    @abstractmethod
    def fetch_live_price(self, symbol: str, timeout: float | None = None) -> LivePrice:
        """
        Fetch the current price snapshot for a symbol.

        Args:
            symbol: Ticker symbol (e.g., "AAPL")
            timeout: Seconds before the request is abandoned

        Returns:
            LivePrice snapshot

        Raises:
            TickerNotFoundError: Symbol unknown to the provider
            ProviderUnavailableError: Network failure or timeout
            RateLimitError: Provider throttled the request
        """
        pass

    @abstractmethod
    def fetch_fundamentals(self, symbol: str, timeout: float | None = None) -> Fundamentals:
        """
        Fetch company fundamentals for a symbol.

        Raises the same errors as fetch_live_price. Callers treat any failure
        here as "fields unavailable", never as a failed quote.
        """
        pass

    @abstractmethod
    def fetch_historical_closes(
            self,
            symbol: str,
            range_days: int,
            interval: str = "1d",
            timeout: float | None = None,
    ) -> list[ClosePrice]:
        """
        Fetch closing prices for the trailing `range_days` calendar days.

        Args:
            symbol: Ticker symbol
            range_days: Lookback window in calendar days
            interval: Bar size, "1d" (daily) or "1wk" (weekly)
            timeout: Seconds before the request is abandoned

        Returns:
            Closes ordered oldest first; may be empty for thin symbols
        """
        pass

    def fetch_pe_ratio(self, symbol: str, timeout: float | None = None) -> Decimal | None:
        """
        Fetch only the P/E ratio of a symbol.

        Used for sector peer sampling. The default implementation reads it
        from fetch_fundamentals; providers with a cheaper endpoint override it.
        """
        return self.fetch_fundamentals(symbol, timeout=timeout).pe_ratio

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with exponential backoff on transient failures.

        Raises:
            The last exception once retries are exhausted
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()
