# backend/portfolio_tracker/services/market_data/quotes.py
"""
Quote service: cached, enriched market quotes with a synthetic fallback.

get_quote(symbol) is the single entry point used by valuation, summaries
and recommendations. It:

1. Serves a cached quote if it is younger than the quote TTL (5 minutes)
2. Otherwise fetches the live price (the only call that must succeed)
3. Adds fundamentals, the 50-day moving average and 6M/1Y/3Y price changes
   (from one daily and one weekly history series);
   each of these is optional and is simply left out when its call fails
   or the history is too thin
4. Adds the sector-average P/E (peer sample, cached 1 hour per sector)
5. If the live price cannot be fetched and synthetic quotes are allowed,
   returns a deterministic placeholder flagged with is_synthetic=True

Synthetic quotes are never cached, so the next request retries the
provider. An unknown symbol (TickerNotFoundError) is not a provider outage
and is never papered over with a synthetic quote.

Usage:
    from portfolio_tracker.dependencies import get_quote_service

    quote = get_quote_service().get_quote("AAPL")
    if quote.is_synthetic:
        ...
"""

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable

from portfolio_tracker.services.constants import (
    DAILY_HISTORY_DAYS,
    MAX_SECTOR_PEERS,
    MONEY_QUANTUM,
    MOVING_AVERAGE_LOOKBACK_DAYS,
    MOVING_AVERAGE_MIN_POINTS,
    MOVING_AVERAGE_WINDOW,
    ONE_YEAR_WINDOW,
    PERCENT_QUANTUM,
    SIX_MONTH_WINDOW,
    THREE_YEAR_WINDOW,
)
from portfolio_tracker.services.exceptions import (
    MarketDataError,
    QuoteUnavailableError,
    TickerNotFoundError,
    ValidationError,
)
from portfolio_tracker.services.market_data import estimates
from portfolio_tracker.services.market_data.base import (
    ClosePrice,
    Fundamentals,
    LivePrice,
    MarketDataProvider,
)
from portfolio_tracker.services.market_data.cache import TTLCache
from portfolio_tracker.services.market_data.types import MarketQuote, PriceChange

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")

# Free cash flow estimate when the provider reports none: 8% of market cap
_FCF_MARKET_CAP_RATIO = Decimal("0.08")

# Synthetic 52-week range around the placeholder price
_SYNTHETIC_RANGE_HIGH = Decimal("1.2")
_SYNTHETIC_RANGE_LOW = Decimal("0.8")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def _as_percent(fraction: Decimal | None) -> Decimal | None:
    return fraction * _HUNDRED if fraction is not None else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _trailing(closes: list[ClosePrice], range_days: int, today: date) -> list[ClosePrice]:
    """Closes that fall within the last range_days days."""
    cutoff = today - timedelta(days=range_days)
    return [c for c in closes if c.date >= cutoff]


class QuoteService:
    """
    Builds MarketQuotes from a MarketDataProvider.

    Holds the two process-wide caches (quote by symbol, average P/E by
    sector). Both are injectable for tests.

    Args:
        provider: Market data provider
        quote_cache: Cache for quotes (default: 300s TTL)
        sector_pe_cache: Cache for sector averages (default: 3600s TTL)
        allow_synthetic: Serve placeholder quotes when the provider is down
        price_timeout: Timeout for the live price and history calls
        fundamentals_timeout: Timeout for the fundamentals call
        peer_timeout: Timeout for each sector peer P/E lookup
        now: Wall-clock source for fetched_at
    """

    def __init__(
            self,
            provider: MarketDataProvider,
            quote_cache: TTLCache[str, MarketQuote] | None = None,
            sector_pe_cache: TTLCache[str, Decimal] | None = None,
            allow_synthetic: bool = False,
            price_timeout: float = 10.0,
            fundamentals_timeout: float = 5.0,
            peer_timeout: float = 3.0,
            now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._quote_cache = quote_cache if quote_cache is not None else TTLCache(300)
        self._sector_pe_cache = sector_pe_cache if sector_pe_cache is not None else TTLCache(3600)
        self._allow_synthetic = allow_synthetic
        self._price_timeout = price_timeout
        self._fundamentals_timeout = fundamentals_timeout
        self._peer_timeout = peer_timeout
        self._now = now

    @property
    def provider_name(self) -> str:
        return self._provider.name

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_quote(self, symbol: str) -> MarketQuote:
        """
        Return a fresh quote for a symbol.

        Raises:
            TickerNotFoundError: The provider does not know the symbol
            QuoteUnavailableError: The live fetch failed and synthetic
                quotes are not allowed
        """
        symbol = symbol.strip().upper()

        cached = self._quote_cache.get(symbol)
        if cached is not None:
            logger.debug(f"Quote cache hit for {symbol}")
            return cached

        try:
            quote = self._fetch_live_quote(symbol)
        except TickerNotFoundError:
            raise
        except MarketDataError as e:
            if not self._allow_synthetic:
                logger.error(f"Quote for {symbol} unavailable: {e}")
                raise QuoteUnavailableError(symbol, reason=str(e), provider=self._provider.name)
            logger.warning(f"Live quote for {symbol} failed ({e}); serving synthetic quote")
            return self.synthetic_quote(symbol)

        self._quote_cache.set(symbol, quote)
        logger.info(f"Fetched live quote for {symbol}: {quote.current_price}")
        return quote

    def get_quotes(self, symbols: list[str]) -> dict[str, MarketQuote]:
        """
        Quote several symbols, skipping the ones that cannot be quoted.

        Each symbol is fetched once. Failures are logged and the symbol is
        absent from the result, so one bad ticker does not sink a summary.
        """
        quotes: dict[str, MarketQuote] = {}
        for symbol in dict.fromkeys(s.strip().upper() for s in symbols):
            try:
                quotes[symbol] = self.get_quote(symbol)
            except MarketDataError as e:
                logger.warning(f"Skipping {symbol} in batch quote: {e}")
        return quotes

    def validate_symbol(self, symbol: str) -> MarketQuote:
        """
        Confirm a symbol can be quoted before it is added to a portfolio.

        Only an unknown symbol is a validation failure. A provider outage
        propagates as QuoteUnavailableError so callers can report it as such.

        Raises:
            ValidationError: The provider does not know the symbol
            QuoteUnavailableError: The symbol cannot be quoted right now
        """
        try:
            return self.get_quote(symbol)
        except TickerNotFoundError as e:
            raise ValidationError(f"Invalid stock symbol: {symbol} ({e})", field="symbol")

    def get_sector_pe_average(self, sector: str | None) -> Decimal | None:
        """
        Average P/E of up to five peers in a sector.

        Only positive P/E values count. Falls back to the static sector
        table when no peer could be read; the fallback is not cached.
        """
        if not sector:
            return None

        cached = self._sector_pe_cache.get(sector)
        if cached is not None:
            return cached

        ratios: list[Decimal] = []
        for peer in estimates.sector_peers(sector)[:MAX_SECTOR_PEERS]:
            try:
                pe_ratio = self._provider.fetch_pe_ratio(peer, timeout=self._peer_timeout)
            except MarketDataError as e:
                logger.debug(f"Peer P/E for {peer} unavailable: {e}")
                continue
            if pe_ratio is not None and pe_ratio > 0:
                ratios.append(pe_ratio)

        if not ratios:
            logger.info(f"No peer P/E data for {sector}; using static estimate")
            return estimates.sector_pe_fallback(sector)

        average = _round2(sum(ratios) / len(ratios))
        self._sector_pe_cache.set(sector, average)
        logger.debug(f"Sector P/E for {sector}: {average} from {len(ratios)} peers")
        return average

    def clear_cache(self) -> None:
        self._quote_cache.clear()
        self._sector_pe_cache.clear()

    # =========================================================================
    # LIVE QUOTE ASSEMBLY
    # =========================================================================

    def _fetch_live_quote(self, symbol: str) -> MarketQuote:
        price = self._provider.fetch_live_price(symbol, timeout=self._price_timeout)
        fundamentals = self._fetch_fundamentals(symbol) or Fundamentals()

        sector = fundamentals.sector or estimates.estimate_sector(symbol)
        current = price.current_price

        day_change, day_change_percent = self._day_change(price)

        earnings_growth = fundamentals.earnings_growth
        if earnings_growth is None:
            earnings_growth = estimates.estimate_earnings_growth(symbol)
        sales_growth = fundamentals.revenue_growth
        if sales_growth is None:
            sales_growth = estimates.estimate_sales_growth(symbol)
        roic = fundamentals.return_on_equity
        if roic is None:
            roic = estimates.estimate_roic(symbol)

        pe_ratio = fundamentals.pe_ratio
        if pe_ratio is None:
            pe_ratio = estimates.estimate_pe_ratio(symbol, sector)

        dividend_yield = _as_percent(fundamentals.dividend_yield)
        if dividend_yield is None:
            dividend_yield = estimates.estimate_dividend_yield(symbol)

        market_cap = price.market_cap if price.market_cap is not None else fundamentals.market_cap
        free_cashflow = fundamentals.free_cashflow
        if free_cashflow is None and market_cap is not None:
            free_cashflow = market_cap * _FCF_MARKET_CAP_RATIO

        today = self._now().date()
        daily = self._history(symbol, DAILY_HISTORY_DAYS, "1d")
        weekly = self._history(symbol, THREE_YEAR_WINDOW[0], THREE_YEAR_WINDOW[1])

        return MarketQuote(
            symbol=symbol,
            current_price=current,
            fetched_at=self._now(),
            is_synthetic=False,
            previous_close=price.previous_close,
            day_change=day_change,
            day_change_percent=day_change_percent,
            volume=price.volume,
            avg_volume=fundamentals.average_volume,
            market_cap=market_cap,
            week_52_high=price.week_52_high if price.week_52_high is not None else fundamentals.week_52_high,
            week_52_low=price.week_52_low if price.week_52_low is not None else fundamentals.week_52_low,
            long_name=price.long_name or fundamentals.long_name,
            sector=sector,
            industry=fundamentals.industry,
            pe_ratio=pe_ratio,
            sector_pe_average=self.get_sector_pe_average(sector),
            dividend_yield=dividend_yield,
            earnings_growth=_as_percent(earnings_growth),
            eps_growth_rate=_as_percent(earnings_growth),
            sales_growth_rate=_as_percent(sales_growth),
            roic=_as_percent(roic),
            moving_average_50_day=self._moving_average_50_day(
                symbol, _trailing(daily, MOVING_AVERAGE_LOOKBACK_DAYS, today)
            ),
            change_6_month=self._window_change(
                symbol, current, _trailing(daily, SIX_MONTH_WINDOW[0], today), SIX_MONTH_WINDOW[2]
            ),
            change_1_year=self._window_change(
                symbol, current, _trailing(daily, ONE_YEAR_WINDOW[0], today), ONE_YEAR_WINDOW[2]
            ),
            change_3_year=self._window_change(symbol, current, weekly, THREE_YEAR_WINDOW[2]),
            total_revenue=fundamentals.total_revenue,
            total_debt=fundamentals.total_debt,
            total_cash=fundamentals.total_cash,
            free_cashflow=free_cashflow,
            ebitda=fundamentals.ebitda,
            return_on_assets=_as_percent(fundamentals.return_on_assets),
            return_on_equity=_as_percent(roic),
            profit_margins=_as_percent(fundamentals.profit_margins),
            operating_margins=_as_percent(fundamentals.operating_margins),
            current_ratio=fundamentals.current_ratio,
            quick_ratio=fundamentals.quick_ratio,
            debt_to_equity=fundamentals.debt_to_equity,
            price_to_book=fundamentals.price_to_book,
            peg_ratio=fundamentals.peg_ratio,
            book_value=fundamentals.book_value,
            trailing_eps=fundamentals.trailing_eps,
            forward_eps=fundamentals.forward_eps,
            payout_ratio=_as_percent(fundamentals.payout_ratio),
        )

    def _fetch_fundamentals(self, symbol: str) -> Fundamentals | None:
        try:
            return self._provider.fetch_fundamentals(symbol, timeout=self._fundamentals_timeout)
        except MarketDataError as e:
            logger.warning(f"Fundamentals for {symbol} unavailable, omitting: {e}")
            return None

    @staticmethod
    def _day_change(price: LivePrice) -> tuple[Decimal | None, Decimal | None]:
        if price.previous_close is None:
            return None, None
        change = price.current_price - price.previous_close
        if price.previous_close > 0:
            percent = _round2(change / price.previous_close * _HUNDRED)
        else:
            percent = Decimal("0")
        return change, percent

    def _history(self, symbol: str, range_days: int, interval: str) -> list[ClosePrice]:
        """Closing prices for the range, or an empty list when the call fails."""
        try:
            return self._provider.fetch_historical_closes(
                symbol,
                range_days,
                interval,
                timeout=self._price_timeout,
            )
        except MarketDataError as e:
            logger.warning(f"{range_days}-day {interval} history for {symbol} unavailable: {e}")
            return []

    @staticmethod
    def _moving_average_50_day(symbol: str, closes: list[ClosePrice]) -> Decimal | None:
        """Mean of the last 50 daily closes (or fewer, down to 30)."""
        if len(closes) < MOVING_AVERAGE_MIN_POINTS:
            logger.debug(f"Only {len(closes)} closes for {symbol}; no 50-day average")
            return None

        window = [c.close for c in closes[-MOVING_AVERAGE_WINDOW:]]
        return _round2(sum(window) / len(window))

    @staticmethod
    def _window_change(
            symbol: str,
            current_price: Decimal,
            closes: list[ClosePrice],
            min_points: int,
    ) -> PriceChange | None:
        """Change from the first close in the window to the current price."""
        if len(closes) < min_points:
            logger.debug(
                f"Only {len(closes)} closes for {symbol} in window "
                f"(need {min_points})"
            )
            return None

        first_close = closes[0].close
        if first_close <= 0:
            return None

        change = current_price - first_close
        return PriceChange(
            change=change.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
            change_percent=_round2(change / first_close * _HUNDRED),
        )

    # =========================================================================
    # SYNTHETIC FALLBACK
    # =========================================================================

    def synthetic_quote(self, symbol: str) -> MarketQuote:
        """
        Deterministic placeholder quote built from the estimate tables.

        Flagged is_synthetic=True; carries no historical metrics because no
        history was observed.
        """
        symbol = symbol.strip().upper()
        price = estimates.synthetic_price(symbol)
        sector = estimates.estimate_sector(symbol)
        earnings_growth = _as_percent(estimates.estimate_earnings_growth(symbol))
        roic = _as_percent(estimates.estimate_roic(symbol))

        return MarketQuote(
            symbol=symbol,
            current_price=price,
            fetched_at=self._now(),
            is_synthetic=True,
            previous_close=price,
            day_change=Decimal("0"),
            day_change_percent=Decimal("0"),
            week_52_high=price * _SYNTHETIC_RANGE_HIGH,
            week_52_low=price * _SYNTHETIC_RANGE_LOW,
            sector=sector,
            pe_ratio=estimates.estimate_pe_ratio(symbol, sector),
            sector_pe_average=estimates.sector_pe_fallback(sector),
            dividend_yield=estimates.estimate_dividend_yield(symbol),
            earnings_growth=earnings_growth,
            eps_growth_rate=earnings_growth,
            sales_growth_rate=_as_percent(estimates.estimate_sales_growth(symbol)),
            roic=roic,
            return_on_equity=roic,
        )
