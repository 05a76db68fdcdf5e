# backend/tests/services/test_summary_service.py
"""
Integration tests for PortfolioSummaryService.

Positions and cash flows live in the in-memory database; quotes come from
the mock provider.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from portfolio_tracker.models import CashFlowType
from portfolio_tracker.services.analytics import PortfolioSummaryService
from portfolio_tracker.services.cash_ledger import CashLedgerService
from portfolio_tracker.services.exceptions import ProviderUnavailableError
from portfolio_tracker.services.market_data.quotes import QuoteService
from tests.conftest import create_list, create_position, make_closes


@pytest.fixture
def ledger() -> CashLedgerService:
    return CashLedgerService()


@pytest.fixture
def summary_service(quote_service, position_service, ledger) -> PortfolioSummaryService:
    return PortfolioSummaryService(quote_service, position_service, ledger)


class TestGetSummary:

    def test_watch_only_and_owned_positions(self, db, mock_provider, summary_service, sample_user):
        mock_provider.add_price("TSLA", "250")
        mock_provider.add_price("AAPL", "175")
        mock_provider.add_price("MSFT", "280")
        create_position(db, sample_user, symbol="TSLA", quantity="0", purchase_price=None)
        create_position(db, sample_user, symbol="AAPL", quantity="10", purchase_price="150")
        create_position(db, sample_user, symbol="MSFT", quantity="5", purchase_price="300")

        summary = summary_service.get_summary(db, sample_user.id)

        assert summary.item_count == 3
        assert summary.total_value == Decimal("3150.00")
        assert summary.total_gain_loss == Decimal("150.00")

    def test_gain_percent_against_deposits(self, db, mock_provider, summary_service, ledger, sample_user):
        mock_provider.add_price("AAPL", "115")
        create_position(db, sample_user, symbol="AAPL", quantity="80", purchase_price="100")
        ledger.add_cash_flow(db, sample_user.id, CashFlowType.DEPOSIT, Decimal("10000"))

        summary = summary_service.get_summary(db, sample_user.id)

        assert summary.total_gain_loss == Decimal("1200.00")
        assert summary.total_cash_invested == Decimal("10000.00")
        assert summary.total_gain_loss_percent == Decimal("12.00")

    def test_annualized_with_explicit_valuation_date(self, db, mock_provider, summary_service, ledger, sample_user):
        as_of = date(2026, 6, 30)
        mock_provider.add_price("AAPL", "144")
        create_position(db, sample_user, symbol="AAPL", quantity="10", purchase_price="100",
                        purchase_date=as_of - timedelta(days=1461))
        ledger.add_cash_flow(db, sample_user.id, CashFlowType.DEPOSIT, Decimal("1000"))

        summary = summary_service.get_summary(db, sample_user.id, as_of=as_of)

        assert summary.annualized_return == Decimal("9.54")

    def test_unquotable_symbol_only_blanks_itself(self, db, mock_provider, summary_service, sample_user):
        mock_provider.add_price("AAPL", "110")
        mock_provider.add_error("GONE", ProviderUnavailableError("mock"))
        create_position(db, sample_user, symbol="AAPL", quantity="1", purchase_price="100")
        create_position(db, sample_user, symbol="GONE", quantity="5", purchase_price="10")

        summary = summary_service.get_summary(db, sample_user.id)

        assert summary.item_count == 2
        assert summary.total_value == Decimal("110.00")
        assert summary.synthetic_quote_count == 0

    def test_synthetic_quotes_are_counted(self, db, mock_provider, position_service, ledger, sample_user):
        service = PortfolioSummaryService(
            QuoteService(provider=mock_provider, allow_synthetic=True), position_service, ledger,
        )
        mock_provider.add_price("AAPL", "110")
        mock_provider.add_error("GONE", ProviderUnavailableError("mock"))
        create_position(db, sample_user, symbol="AAPL", quantity="1", purchase_price="100")
        create_position(db, sample_user, symbol="GONE", quantity="5", purchase_price="10")

        summary = service.get_summary(db, sample_user.id)

        # GONE is valued at the 100 placeholder price
        assert summary.total_value == Decimal("610.00")
        assert summary.synthetic_quote_count == 1

    def test_list_scope(self, db, mock_provider, summary_service, ledger, sample_user):
        core = create_list(db, sample_user, name="Core", is_default=True)
        mock_provider.add_price("AAPL", "110")
        mock_provider.add_price("MSFT", "500")
        create_position(db, sample_user, symbol="AAPL", quantity="1", purchase_price="100", list_id=core.id)
        create_position(db, sample_user, symbol="MSFT", quantity="1", purchase_price="400")
        ledger.add_cash_flow(db, sample_user.id, CashFlowType.DEPOSIT, Decimal("100"), list_id=core.id)

        summary = summary_service.get_summary(db, sample_user.id, list_id=core.id)

        assert summary.item_count == 1
        assert summary.total_value == Decimal("110.00")
        assert summary.total_gain_loss_percent == Decimal("10.00")

    def test_thin_history_leaves_windows_empty(self, db, mock_provider, summary_service, sample_user):
        mock_provider.add_price("AAPL", "110")
        mock_provider.set_closes("AAPL", make_closes(20, start_price="100"))
        create_position(db, sample_user, symbol="AAPL", quantity="1", purchase_price="100")

        summary = summary_service.get_summary(db, sample_user.id)

        assert summary.time_based_returns.six_month is None
        assert summary.time_based_returns.one_year is None
        assert summary.time_based_returns.three_year is None


class TestEnrichedPositions:

    def test_each_position_carries_quote_and_valuation(self, db, mock_provider, summary_service, sample_user):
        mock_provider.add_price("AAPL", "175")
        mock_provider.add_price("TSLA", "250")
        create_position(db, sample_user, symbol="AAPL", quantity="10", purchase_price="150")
        create_position(db, sample_user, symbol="TSLA", quantity="0", purchase_price=None)

        enriched = {e.position.symbol: e for e in summary_service.enriched_positions(db, sample_user.id)}

        aapl = enriched["AAPL"].valued
        assert aapl.quote.current_price == Decimal("175")
        assert aapl.valuation.gain_loss_percent == Decimal("16.67")

        tsla = enriched["TSLA"].valued
        assert tsla.is_owned is False
        assert tsla.quote.current_price == Decimal("250")
        assert tsla.valuation.current_value is None
