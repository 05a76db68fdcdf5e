# backend/portfolio_tracker/schemas/quotes.py
"""
Pydantic schemas for market quotes.

Percent fields are whole-number percents (16.67 means 16.67%).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class PriceChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    change: Decimal
    change_percent: Decimal


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    current_price: Decimal
    fetched_at: datetime
    is_synthetic: bool

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
    change_6_month: PriceChangeResponse | None = None
    change_1_year: PriceChangeResponse | None = None
    change_3_year: PriceChangeResponse | None = None

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
