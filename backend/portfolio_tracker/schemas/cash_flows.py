# backend/portfolio_tracker/schemas/cash_flows.py
"""Pydantic schemas for deposits and withdrawals."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from portfolio_tracker.models import CashFlowType


class CashFlowCreate(BaseModel):
    flow_type: CashFlowType = Field(..., examples=[CashFlowType.DEPOSIT])
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=2,
        description="Amount of cash moved (always positive)",
        examples=["10000.00"]
    )
    date: datetime | None = Field(default=None, description="Default: now")
    description: str | None = Field(default=None, max_length=500)
    list_id: int | None = Field(default=None, gt=0)


class CashFlowUpdate(BaseModel):
    """All fields optional; only sent fields are changed."""

    flow_type: CashFlowType | None = None
    amount: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=2)
    date: datetime | None = None
    description: str | None = Field(default=None, max_length=500)
    list_id: int | None = Field(default=None, gt=0)


class CashFlowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    list_id: int | None
    flow_type: CashFlowType
    amount: Decimal
    date: datetime
    description: str | None
    created_at: datetime


class NetCashResponse(BaseModel):
    user_id: int
    list_id: int | None
    net_cash_invested: Decimal
