# backend/portfolio_tracker/schemas/transactions.py
"""
Pydantic schemas for buy/sell transactions.

Transactions are immutable once recorded, so there is no update schema.
"""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_tracker.models import TransactionType
from portfolio_tracker.schemas.validators import validate_symbol


class TransactionCreate(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=10, examples=["AAPL"])
    transaction_type: TransactionType = Field(
        ...,
        examples=[TransactionType.BUY, TransactionType.SELL]
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Number of shares traded (must be positive)",
    )
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Price per share (must be positive)",
    )
    fees: Decimal = Field(default=Decimal("0"), ge=0, max_digits=18, decimal_places=8)
    date: datetime | None = Field(default=None, description="Trade time (default: now)")
    list_id: int | None = Field(default=None, gt=0)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator('symbol')
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return validate_symbol(v)

    @field_validator('date')
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Naive timestamps are taken as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    position_id: int | None
    list_id: int | None
    symbol: str
    transaction_type: TransactionType
    quantity: Decimal
    price: Decimal
    fees: Decimal
    notes: str | None
    date: datetime
    created_at: datetime


class TradeSummaryResponse(BaseModel):
    """Per-symbol roll-up of the transaction log."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    transaction_count: int
    total_bought: Decimal
    total_sold: Decimal
    current_quantity: Decimal
    average_buy_price: Decimal
    average_sell_price: Decimal | None
    total_fees: Decimal
    realized_gain_loss: Decimal
    unrealized_gain_loss: Decimal | None
    total_return: Decimal | None
    total_return_percent: Decimal | None
