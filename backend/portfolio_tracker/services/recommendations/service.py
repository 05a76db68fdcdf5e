# backend/portfolio_tracker/services/recommendations/service.py
"""
Recommendation service.

Turns the user's quote-enriched positions into StockSignals and runs the
rules over them. Only owned positions are analyzed; watch-only entries
hold no value and would dilute the allocation and rebalancing math. Owned
positions without a quote are still counted for the diversification and
risk scores but cannot trigger a buy or sell.
"""

import logging

from sqlalchemy.orm import Session

from portfolio_tracker.services.analytics.service import EnrichedPosition, PortfolioSummaryService
from portfolio_tracker.services.recommendations import rules
from portfolio_tracker.services.recommendations.types import PortfolioAnalysis, StockSignals

logger = logging.getLogger(__name__)


def signals_from_position(enriched: EnrichedPosition) -> StockSignals:
    position = enriched.position
    quote = enriched.valued.quote
    if quote is None:
        return StockSignals(symbol=position.symbol, quantity=position.quantity)
    return StockSignals(
        symbol=position.symbol,
        current_price=quote.current_price,
        pe_ratio=quote.pe_ratio,
        earnings_growth=quote.earnings_growth,
        roic=quote.roic,
        moving_average_50_day=quote.moving_average_50_day,
        sector=quote.sector,
        value=enriched.valued.valuation.current_value,
        quantity=position.quantity,
    )


def analyze(stocks: list[StockSignals]) -> PortfolioAnalysis:
    """Run every rule over a set of holdings."""
    if not stocks:
        return PortfolioAnalysis()

    recommendations = [r for r in (rules.evaluate_stock(s) for s in stocks) if r is not None]
    recommendations.extend(rules.concentration_alerts(stocks))

    return PortfolioAnalysis(
        recommendations=rules.sort_recommendations(recommendations),
        sector_allocation=rules.sector_allocation(stocks),
        rebalancing=rules.rebalancing_actions(stocks),
        risk_score=rules.risk_score(stocks),
        diversification_score=rules.diversification_score(stocks),
    )


class RecommendationService:

    def __init__(self, summary_service: PortfolioSummaryService) -> None:
        self._summary = summary_service

    def analyze_portfolio(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
    ) -> PortfolioAnalysis:
        enriched = self._summary.enriched_positions(db, user_id, list_id)
        owned = [e for e in enriched if e.valued.is_owned]
        analysis = analyze([signals_from_position(e) for e in owned])
        logger.info(
            f"Analyzed {len(owned)} owned positions for user {user_id}: "
            f"{len(analysis.recommendations)} recommendations"
        )
        return analysis
