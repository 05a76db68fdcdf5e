# backend/portfolio_tracker/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Organized by domain:
- errors: Error response formats
- users, lists: Account data
- positions, transactions, cash_flows: Portfolio data
- quotes: Market quotes
- summary: Portfolio performance summary
- recommendations: Rule-based signals and allocation analysis
- validators: Reusable validation functions
"""

from portfolio_tracker.schemas.cash_flows import (
    CashFlowCreate,
    CashFlowResponse,
    CashFlowUpdate,
    NetCashResponse,
)
from portfolio_tracker.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_tracker.schemas.lists import ListCreate, ListResponse, ListUpdate
from portfolio_tracker.schemas.positions import (
    BulkAddResponse,
    BulkFailure,
    BulkPositionCreate,
    EnrichedPositionResponse,
    PositionCreate,
    PositionResponse,
    PositionUpdate,
    SellRequest,
)
from portfolio_tracker.schemas.quotes import PriceChangeResponse, QuoteResponse
from portfolio_tracker.schemas.recommendations import (
    PortfolioAnalysisResponse,
    RebalanceActionResponse,
    RecommendationResponse,
    SectorAllocationResponse,
)
from portfolio_tracker.schemas.summary import PortfolioSummaryResponse, TimeBasedReturnsResponse
from portfolio_tracker.schemas.transactions import (
    TradeSummaryResponse,
    TransactionCreate,
    TransactionResponse,
)
from portfolio_tracker.schemas.users import UserCreate, UserResponse

__all__ = [
    "CashFlowCreate",
    "CashFlowResponse",
    "CashFlowUpdate",
    "NetCashResponse",
    "ErrorDetail",
    "ValidationErrorDetail",
    "ListCreate",
    "ListResponse",
    "ListUpdate",
    "BulkAddResponse",
    "BulkFailure",
    "BulkPositionCreate",
    "EnrichedPositionResponse",
    "PositionCreate",
    "PositionResponse",
    "PositionUpdate",
    "SellRequest",
    "PriceChangeResponse",
    "QuoteResponse",
    "PortfolioAnalysisResponse",
    "RebalanceActionResponse",
    "RecommendationResponse",
    "SectorAllocationResponse",
    "PortfolioSummaryResponse",
    "TimeBasedReturnsResponse",
    "TradeSummaryResponse",
    "TransactionCreate",
    "TransactionResponse",
    "UserCreate",
    "UserResponse",
]
