# backend/portfolio_tracker/services/market_data/types.py
"""
Quote types produced by the QuoteService.

A MarketQuote is the enriched, time-stamped view of one symbol that the
valuation and recommendation code consume. Percent-valued fields are whole
percents (12.5 means 12.5%). Any field the upstream data could not support
is None, never 0.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ReturnWindow(str, Enum):
    """Trailing windows for which a quote carries a price change."""
    SIX_MONTH = "six_month"
    ONE_YEAR = "one_year"
    THREE_YEAR = "three_year"


@dataclass(frozen=True)
class PriceChange:
    """Absolute and percent change of the current price over a window."""
    change: Decimal
    change_percent: Decimal


@dataclass(frozen=True)
class MarketQuote:
    """
    Enriched market snapshot for a symbol.

    Attributes:
        symbol: Upper-case ticker
        current_price: Latest price used for valuation
        fetched_at: When the underlying data was obtained (UTC)
        is_synthetic: True when built from static estimates because the
            provider was unreachable. Synthetic quotes keep the UI populated
            and must not be relied on for accurate figures.
    """
    symbol: str
    current_price: Decimal
    fetched_at: datetime
    is_synthetic: bool = False

    previous_close: Decimal | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    volume: int | None = None
    avg_volume: int | None = None
    market_cap: Decimal | None = None
    week_52_high: Decimal | None = None
    week_52_low: Decimal | None = None

    long_name: str | None = None
    sector: str | None = None
    industry: str | None = None

    pe_ratio: Decimal | None = None
    sector_pe_average: Decimal | None = None
    dividend_yield: Decimal | None = None
    earnings_growth: Decimal | None = None
    eps_growth_rate: Decimal | None = None
    sales_growth_rate: Decimal | None = None
    roic: Decimal | None = None

    moving_average_50_day: Decimal | None = None
    change_6_month: PriceChange | None = None
    change_1_year: PriceChange | None = None
    change_3_year: PriceChange | None = None

    total_revenue: Decimal | None = None
    total_debt: Decimal | None = None
    total_cash: Decimal | None = None
    free_cashflow: Decimal | None = None
    ebitda: Decimal | None = None
    return_on_assets: Decimal | None = None
    return_on_equity: Decimal | None = None
    profit_margins: Decimal | None = None
    operating_margins: Decimal | None = None
    current_ratio: Decimal | None = None
    quick_ratio: Decimal | None = None
    debt_to_equity: Decimal | None = None
    price_to_book: Decimal | None = None
    peg_ratio: Decimal | None = None
    book_value: Decimal | None = None
    trailing_eps: Decimal | None = None
    forward_eps: Decimal | None = None
    payout_ratio: Decimal | None = None

    def change_for(self, window: ReturnWindow) -> PriceChange | None:
        """The price change for a trailing window, or None when unknown."""
        return {
            ReturnWindow.SIX_MONTH: self.change_6_month,
            ReturnWindow.ONE_YEAR: self.change_1_year,
            ReturnWindow.THREE_YEAR: self.change_3_year,
        }[window]
