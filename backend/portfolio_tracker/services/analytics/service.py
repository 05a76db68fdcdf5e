# backend/portfolio_tracker/services/analytics/service.py
"""
Portfolio summary service.

Glue between storage, market data and the pure performance functions:

    positions (db) -> quotes (QuoteService) -> valuate -> summarize
                                  cash ledger (db) ----^

A symbol that cannot be quoted only blanks its own position; the summary
is still produced from everything else.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from portfolio_tracker.models import Position
from portfolio_tracker.services.analytics.performance import PortfolioSummary, summarize
from portfolio_tracker.services.cash_ledger import CashLedgerService
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.positions.service import PositionService
from portfolio_tracker.services.valuation.calculators import valuate_position
from portfolio_tracker.services.valuation.types import ValuedHolding

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichedPosition:
    """A stored position with its quote and valuation."""
    position: Position
    valued: ValuedHolding


class PortfolioSummaryService:
    """
    Builds portfolio summaries and quote-enriched position lists.

    Args:
        quote_service: Source of current quotes
        position_service: Position queries
        cash_ledger: Net cash invested
    """

    def __init__(
            self,
            quote_service: QuoteService,
            position_service: PositionService,
            cash_ledger: CashLedgerService,
    ) -> None:
        self._quotes = quote_service
        self._positions = position_service
        self._cash_ledger = cash_ledger

    def enriched_positions(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
    ) -> list[EnrichedPosition]:
        """Positions newest first, each valued at its current quote."""
        positions = self._positions.list_positions(db, user_id, list_id)
        quotes = self._quotes.get_quotes([p.symbol for p in positions])

        enriched = []
        for position in positions:
            quote = quotes.get(position.symbol)
            enriched.append(EnrichedPosition(position, valuate_position(position, quote)))
        return enriched

    def get_summary(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
            as_of: date | None = None,
    ) -> PortfolioSummary:
        """
        Summarize the user's portfolio, or one of its lists.

        Args:
            db: Database session
            user_id: Owner
            list_id: Restrict positions and cash flows to one list
            as_of: Valuation date for holding periods (default: today)
        """
        holdings = [e.valued for e in self.enriched_positions(db, user_id, list_id)]
        cash_invested = self._cash_ledger.net_cash_invested(db, user_id, list_id)

        summary = summarize(holdings, cash_invested, as_of=as_of)
        logger.info(
            f"Summary for user {user_id}"
            + (f" list {list_id}" if list_id is not None else "")
            + f": {summary.item_count} items, value {summary.total_value}"
        )
        return summary
