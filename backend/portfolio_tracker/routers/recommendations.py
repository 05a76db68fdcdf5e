# backend/portfolio_tracker/routers/recommendations.py
"""Rule-based recommendation endpoint."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_recommendation_service, get_user
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_MARKET_DATA
from portfolio_tracker.models import User
from portfolio_tracker.schemas.recommendations import (
    PortfolioAnalysisResponse,
    RebalanceActionResponse,
    RecommendationResponse,
    SectorAllocationResponse,
)
from portfolio_tracker.services.recommendations.service import RecommendationService

router = APIRouter(
    prefix="/recommendations",
    tags=["Recommendations"],
)


@router.get(
    "/",
    response_model=PortfolioAnalysisResponse,
    summary="Buy/sell/diversify signals and allocation analysis",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_recommendations(
        request: Request,  # Required for rate limiting
        user: User = Depends(get_user),
        list_id: int | None = Query(default=None, gt=0),
        db: Session = Depends(get_db),
        service: RecommendationService = Depends(get_recommendation_service),
) -> PortfolioAnalysisResponse:
    """Recommendations are sorted by priority times confidence, highest first."""
    analysis = service.analyze_portfolio(db, user.id, list_id)
    return PortfolioAnalysisResponse(
        recommendations=[
            RecommendationResponse(
                kind=r.kind,
                symbol=r.symbol,
                title=r.title,
                description=r.description,
                confidence=r.confidence,
                priority=r.priority.value,
                reasoning=r.reasoning,
            )
            for r in analysis.recommendations
        ],
        sector_allocation=[SectorAllocationResponse.model_validate(s) for s in analysis.sector_allocation],
        rebalancing=[
            RebalanceActionResponse(
                symbol=a.symbol,
                current_percent=a.current_percent,
                target_percent=a.target_percent,
                action=a.action.value,
                quantity=a.quantity,
                reason=a.reason,
            )
            for a in analysis.rebalancing
        ],
        risk_score=analysis.risk_score,
        diversification_score=analysis.diversification_score,
    )
