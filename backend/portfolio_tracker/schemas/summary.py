# backend/portfolio_tracker/schemas/summary.py
"""
Pydantic schemas for the portfolio summary.

Percent fields are whole-number percents. Time-windowed returns are None
when no holding has enough price history for the window.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TimeBasedReturnsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    six_month: Decimal | None = None
    one_year: Decimal | None = None
    three_year: Decimal | None = None


class PortfolioSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal = Field(
        ...,
        description="Gain over net cash invested, in percent"
    )
    annualized_return: Decimal
    total_cash_invested: Decimal
    item_count: int = Field(..., description="All positions, watch-only included")
    time_based_returns: TimeBasedReturnsResponse
    synthetic_quote_count: int = Field(
        0,
        description="Owned positions valued from a placeholder quote; totals are estimates when > 0"
    )
