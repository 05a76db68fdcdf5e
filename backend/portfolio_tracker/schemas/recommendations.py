# backend/portfolio_tracker/schemas/recommendations.py
"""Pydantic schemas for rule-based recommendations."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: Literal["buy", "sell", "diversify"]
    symbol: str | None
    title: str
    description: str
    confidence: int
    priority: Literal["high", "medium", "low"]
    reasoning: list[str]


class SectorAllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sector: str
    percent: Decimal
    recommended_percent: Decimal


class RebalanceActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    current_percent: Decimal
    target_percent: Decimal
    action: Literal["buy", "sell"]
    quantity: Decimal
    reason: str


class PortfolioAnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recommendations: list[RecommendationResponse]
    sector_allocation: list[SectorAllocationResponse]
    rebalancing: list[RebalanceActionResponse]
    risk_score: int
    diversification_score: int
