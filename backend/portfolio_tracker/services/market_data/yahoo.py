# backend/portfolio_tracker/services/market_data/yahoo.py
"""
Yahoo Finance market data provider implementation.

Implements MarketDataProvider on top of the yfinance library:
- live price: a short daily `history()` call plus the chart metadata
- fundamentals: `Ticker.info`
- historical closes: `history()` over the requested window

yfinance has no timeout parameter for `.info`, so that call runs on a small
thread pool and is abandoned once its timeout elapses.

Limitations:
- Rate limits exist but are undocumented
- Prices may be delayed 15-20 minutes
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import yfinance as yf

from portfolio_tracker.services.constants import STORAGE_QUANTUM
from portfolio_tracker.services.exceptions import (
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
)
from portfolio_tracker.services.market_data.base import (
    MarketDataProvider,
    LivePrice,
    Fundamentals,
    ClosePrice,
)

logger = logging.getLogger(__name__)


class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance implementation of MarketDataProvider.

    Configuration:
        timeout: Default request timeout in seconds (default: 10)
        max_workers: Threads available for `.info` lookups (default: 4)

    Retry Behavior:
        Live prices are retried with exponential backoff (inherited from
        MarketDataProvider). Fundamentals and historical closes are not:
        they are optional enrichment and must stay within their timeout.

    Example:
        provider = YahooFinanceProvider(timeout=10)
        price = provider.fetch_live_price("AAPL")
        closes = provider.fetch_historical_closes("AAPL", range_days=180)
    """

    def __init__(self, timeout: float = 10.0, max_workers: int = 4) -> None:
        self._timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="yahoo-info",
        )
        logger.info(f"YahooFinanceProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    # =========================================================================
    # LIVE PRICE
    # =========================================================================

    def fetch_live_price(self, symbol: str, timeout: float | None = None) -> LivePrice:
        return self._execute_with_retry(
            self._fetch_live_price,
            symbol.strip().upper(),
            timeout or self._timeout,
        )

    def _fetch_live_price(self, symbol: str, timeout: float) -> LivePrice:
        logger.debug(f"Fetching live price for {symbol}")

        try:
            yf_ticker = yf.Ticker(symbol)
            df = yf_ticker.history(
                period="5d",
                interval="1d",
                auto_adjust=False,
                timeout=timeout,
            )

            closes = self._frame_to_closes(df) if not df.empty else []
            if not closes:
                self._raise_for_missing_prices(symbol, timeout)

            meta = yf_ticker.get_history_metadata() or {}

            current_price = self._to_decimal(meta.get("regularMarketPrice")) or closes[-1].close
            if len(closes) >= 2:
                previous_close = closes[-2].close
            else:
                previous_close = self._to_decimal(meta.get("chartPreviousClose"))

            volume = self._to_int(meta.get("regularMarketVolume"))
            if volume is None:
                volume = self._to_int(df["Volume"].iloc[-1]) if "Volume" in df.columns else None

            return LivePrice(
                symbol=symbol,
                current_price=current_price,
                previous_close=previous_close,
                volume=volume,
                market_cap=self._to_decimal(meta.get("marketCap")),
                week_52_high=self._to_decimal(meta.get("fiftyTwoWeekHigh")),
                week_52_low=self._to_decimal(meta.get("fiftyTwoWeekLow")),
                long_name=meta.get("longName") or meta.get("shortName"),
                currency=meta.get("currency"),
            )

        except MarketDataError:
            raise
        except Exception as e:
            raise self._classify_error(symbol, e)

    # =========================================================================
    # FUNDAMENTALS
    # =========================================================================

    def fetch_fundamentals(self, symbol: str, timeout: float | None = None) -> Fundamentals:
        symbol = symbol.strip().upper()
        timeout = timeout or self._timeout
        logger.debug(f"Fetching fundamentals for {symbol} (timeout={timeout}s)")

        info = self._load_info_with_timeout(symbol, timeout)
        if not self._is_valid_ticker_info(info):
            raise TickerNotFoundError(symbol=symbol, provider=self.name)

        return self._map_to_fundamentals(info)

    @staticmethod
    def _load_info(symbol: str) -> dict:
        return yf.Ticker(symbol).info

    def _load_info_with_timeout(self, symbol: str, timeout: float) -> dict:
        future = self._executor.submit(self._load_info, symbol)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            future.cancel()
            raise ProviderUnavailableError(
                provider=self.name,
                reason=f"info for {symbol} timed out after {timeout}s",
            )
        except Exception as e:
            raise self._classify_error(symbol, e)

    def _raise_for_missing_prices(self, symbol: str, timeout: float) -> None:
        """
        Decide why history() came back empty.

        yfinance swallows network errors in history() and returns an empty
        frame, the same result it gives for an unknown symbol. `.info` tells
        them apart: it raises when Yahoo is unreachable, and comes back
        without content for a symbol Yahoo does not know.

        Raises:
            TickerNotFoundError: Yahoo does not know the symbol
            ProviderUnavailableError: Yahoo is unreachable, or knows the
                symbol but returned no prices for it
        """
        info = self._load_info_with_timeout(symbol, timeout)
        if not self._is_valid_ticker_info(info):
            raise TickerNotFoundError(symbol=symbol, provider=self.name)

        logger.warning(f"Yahoo knows {symbol} but returned no recent prices")
        raise ProviderUnavailableError(
            provider=self.name,
            reason=f"no recent prices for {symbol}",
        )

    def _map_to_fundamentals(self, info: dict[str, Any]) -> Fundamentals:
        """Map the yfinance `.info` dict onto Fundamentals."""
        d = self._to_decimal
        return Fundamentals(
            long_name=info.get("longName") or info.get("shortName"),
            sector=info.get("sector") or None,
            industry=info.get("industry") or None,
            trailing_pe=d(info.get("trailingPE")),
            forward_pe=d(info.get("forwardPE")),
            peg_ratio=d(info.get("trailingPegRatio") or info.get("pegRatio")),
            price_to_book=d(info.get("priceToBook")),
            book_value=d(info.get("bookValue")),
            trailing_eps=d(info.get("trailingEps")),
            forward_eps=d(info.get("forwardEps")),
            dividend_yield=d(info.get("dividendYield")),
            payout_ratio=d(info.get("payoutRatio")),
            earnings_growth=d(info.get("earningsGrowth")),
            revenue_growth=d(info.get("revenueGrowth")),
            return_on_equity=d(info.get("returnOnEquity")),
            return_on_assets=d(info.get("returnOnAssets")),
            profit_margins=d(info.get("profitMargins")),
            operating_margins=d(info.get("operatingMargins")),
            market_cap=d(info.get("marketCap")),
            average_volume=self._to_int(info.get("averageVolume")),
            week_52_high=d(info.get("fiftyTwoWeekHigh")),
            week_52_low=d(info.get("fiftyTwoWeekLow")),
            total_revenue=d(info.get("totalRevenue")),
            total_debt=d(info.get("totalDebt")),
            total_cash=d(info.get("totalCash")),
            free_cashflow=d(info.get("freeCashflow")),
            ebitda=d(info.get("ebitda")),
            current_ratio=d(info.get("currentRatio")),
            quick_ratio=d(info.get("quickRatio")),
            debt_to_equity=d(info.get("debtToEquity")),
        )

    # =========================================================================
    # HISTORICAL CLOSES
    # =========================================================================

    def fetch_historical_closes(
            self,
            symbol: str,
            range_days: int,
            interval: str = "1d",
            timeout: float | None = None,
    ) -> list[ClosePrice]:
        return self._fetch_historical_closes(
            symbol.strip().upper(),
            range_days,
            interval,
            timeout or self._timeout,
        )

    def _fetch_historical_closes(
            self,
            symbol: str,
            range_days: int,
            interval: str,
            timeout: float,
    ) -> list[ClosePrice]:
        end_date = date.today() + timedelta(days=1)  # end is exclusive
        start_date = end_date - timedelta(days=range_days + 1)

        logger.debug(
            f"Fetching {interval} closes for {symbol}: {start_date} to {end_date}"
        )

        try:
            df = yf.Ticker(symbol).history(
                start=start_date.isoformat(),
                end=end_date.isoformat(),
                interval=interval,
                auto_adjust=False,
                timeout=timeout,
            )
        except Exception as e:
            raise self._classify_error(symbol, e)

        if df.empty:
            logger.debug(f"No {interval} closes for {symbol} in the last {range_days} days")
            return []

        closes = self._frame_to_closes(df)
        logger.debug(f"Fetched {len(closes)} closes for {symbol}")
        return closes

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _frame_to_closes(self, df) -> list[ClosePrice]:
        """Extract (date, close) pairs from a yfinance DataFrame, skipping NaN rows."""
        closes = []
        for idx, row in df.iterrows():
            close = self._to_decimal(row.get("Close"))
            if close is None:
                continue
            price_date = idx.date() if hasattr(idx, "date") else idx
            closes.append(ClosePrice(date=price_date, close=close))
        return closes

    def _classify_error(self, symbol: str, error: Exception) -> MarketDataError:
        """Turn a yfinance/requests exception into the matching MarketDataError."""
        error_str = str(error).lower()

        if "not found" in error_str or "no data" in error_str or "delisted" in error_str:
            return TickerNotFoundError(symbol=symbol, provider=self.name)

        if "rate limit" in error_str or "too many requests" in error_str:
            return RateLimitError(provider=self.name)

        logger.error(f"Yahoo Finance error for {symbol}: {error}")
        return ProviderUnavailableError(provider=self.name, reason=str(error))

    @staticmethod
    def _is_valid_ticker_info(info: dict | None) -> bool:
        """
        Yahoo returns an info dict even for unknown tickers, just without
        meaningful content. A price or a name means the ticker exists.
        """
        if not info:
            return False
        return bool(
            info.get("regularMarketPrice")
            or info.get("currentPrice")
            or info.get("shortName")
            or info.get("longName")
        )

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/None/non-numeric."""
        if value is None or isinstance(value, bool):
            return None
        try:
            if math.isnan(float(value)):
                return None
            return Decimal(str(value)).quantize(STORAGE_QUANTUM)
        except (TypeError, ValueError, ArithmeticError):
            return None

    @staticmethod
    def _to_int(value: Any) -> int | None:
        if value is None:
            return None
        try:
            if math.isnan(float(value)):
                return None
            return int(value)
        except (TypeError, ValueError):
            return None
