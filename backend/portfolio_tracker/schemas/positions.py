# backend/portfolio_tracker/schemas/positions.py
"""
Pydantic schemas for positions.

These schemas define:
- Stock add requests, single and bulk (quantity 0 = watch only)
- Partial position updates and sells
- Positions enriched with a quote and valuation

All financial values use Decimal. Valuation fields are None, never 0,
for watch-only positions and for positions without a quote.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portfolio_tracker.schemas.validators import validate_symbol
from portfolio_tracker.services.constants import MAX_BULK_ITEMS


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PositionCreate(BaseModel):
    """Add a stock. quantity 0 (the default) creates a watch-only entry."""

    symbol: str = Field(..., min_length=1, max_length=10, examples=["AAPL"])

    quantity: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=18,
        decimal_places=8,
        description="Shares held; 0 for watch only",
    )

    purchase_price: Decimal | None = Field(
        default=None,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Average purchase price per share (required when quantity > 0)",
    )

    purchase_date: date | None = Field(default=None)
    list_id: int | None = Field(default=None, gt=0)

    @field_validator('symbol')
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return validate_symbol(v)

    @model_validator(mode='after')
    def require_price_when_owned(self) -> "PositionCreate":
        if self.quantity > 0 and self.purchase_price is None:
            raise ValueError("purchase_price is required when quantity is greater than 0")
        return self


class BulkPositionCreate(BaseModel):
    items: list[PositionCreate] = Field(..., min_length=1, max_length=MAX_BULK_ITEMS)


class PositionUpdate(BaseModel):
    """All fields optional; only sent fields are changed."""

    quantity: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=8)
    purchase_price: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=8)
    purchase_date: date | None = None
    list_id: int | None = Field(default=None, gt=0)


class SellRequest(BaseModel):
    quantity: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=8)
    fees: Decimal = Field(default=Decimal("0"), ge=0, max_digits=18, decimal_places=8)
    date: datetime | None = Field(default=None, description="Trade time (default: now)")
    notes: str | None = Field(default=None, max_length=500)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class PositionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    list_id: int | None
    symbol: str
    quantity: Decimal
    purchase_price: Decimal | None
    purchase_date: date | None
    is_watch_only: bool
    created_at: datetime
    updated_at: datetime


class EnrichedPositionResponse(PositionResponse):
    """A position with live market data and its valuation."""

    current_price: Decimal | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    is_synthetic_quote: bool = False
    current_value: Decimal | None = None
    cost_basis: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None


class BulkFailure(BaseModel):
    symbol: str
    error: str


class BulkAddResponse(BaseModel):
    successful: list[PositionResponse]
    failed: list[BulkFailure]
