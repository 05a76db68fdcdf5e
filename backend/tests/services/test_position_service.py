# backend/tests/services/test_position_service.py
"""
Tests for PositionService against an in-memory database.

Covers:
- Buys: opening, weighted-average folding, watch-only promotion
- Sells: partial, full (position removed, history kept), insufficient shares
- Atomicity of the position change and its transaction row
- Stock add / bulk add / update / delete
- Transaction log queries and the per-symbol trade summary
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from portfolio_tracker.models import Position, Transaction, TransactionType
from portfolio_tracker.services.exceptions import (
    DuplicatePositionError,
    InsufficientSharesError,
    ListNotFoundError,
    PositionNotFoundError,
    ProviderUnavailableError,
    ValidationError,
)
from portfolio_tracker.services.positions import PositionService, StockItem
from tests.conftest import create_list, create_position, create_user


D = Decimal


def _transactions(db) -> list[Transaction]:
    return list(db.scalars(select(Transaction).order_by(Transaction.id)).all())


# =============================================================================
# BUY
# =============================================================================

class TestApplyBuy:

    def test_first_buy_opens_position(self, db, position_service, sample_user):
        trade_date = datetime(2026, 2, 3, 14, 0, tzinfo=timezone.utc)

        position = position_service.apply_buy(
            db, sample_user.id, "aapl", D("10"), D("150"), date=trade_date,
        )

        assert position.symbol == "AAPL"
        assert position.quantity == D("10")
        assert position.purchase_price == D("150")
        assert position.purchase_date == date(2026, 2, 3)

        [txn] = _transactions(db)
        assert txn.transaction_type == TransactionType.BUY
        assert txn.position_id == position.id

    def test_second_buy_folds_into_weighted_average(self, db, position_service, sample_user):
        position_service.apply_buy(db, sample_user.id, "AAPL", D("10"), D("150"))
        position = position_service.apply_buy(db, sample_user.id, "AAPL", D("10"), D("160"))

        assert position.quantity == D("20")
        assert position.purchase_price == D("155")
        assert len(position_service.list_positions(db, sample_user.id)) == 1
        assert len(_transactions(db)) == 2

    def test_average_is_independent_of_buy_order(self, db, position_service):
        first = create_user(db, email="first@example.com")
        second = create_user(db, email="second@example.com")

        position_service.apply_buy(db, first.id, "MSFT", D("10"), D("100"))
        a = position_service.apply_buy(db, first.id, "MSFT", D("5"), D("130"))
        position_service.apply_buy(db, second.id, "MSFT", D("5"), D("130"))
        b = position_service.apply_buy(db, second.id, "MSFT", D("10"), D("100"))

        assert a.purchase_price == b.purchase_price == D("110")

    def test_buy_promotes_watch_only_entry(self, db, position_service, sample_user):
        watched = create_position(db, sample_user, symbol="TSLA", quantity="0", purchase_price=None)
        trade_date = datetime(2026, 1, 15, tzinfo=timezone.utc)

        position = position_service.apply_buy(
            db, sample_user.id, "TSLA", D("2"), D("250"), date=trade_date,
        )

        assert position.id == watched.id
        assert position.quantity == D("2")
        assert position.purchase_price == D("250")
        assert position.purchase_date == date(2026, 1, 15)

    def test_same_symbol_in_different_lists_are_separate(self, db, position_service, sample_user):
        growth = create_list(db, sample_user, name="Growth", is_default=True)

        in_list = position_service.apply_buy(db, sample_user.id, "AAPL", D("1"), D("100"), list_id=growth.id)
        unlisted = position_service.apply_buy(db, sample_user.id, "AAPL", D("1"), D("200"))

        assert in_list.id != unlisted.id
        assert in_list.list_id == growth.id
        assert unlisted.list_id is None

    @pytest.mark.parametrize("quantity,price,fees,field", [
        ("0", "150", "0", "quantity"),
        ("-1", "150", "0", "quantity"),
        ("1", "0", "0", "price"),
        ("1", "150", "-1", "fees"),
    ])
    def test_invalid_trade_rejected_before_mutation(
            self, db, position_service, sample_user, quantity, price, fees, field,
    ):
        with pytest.raises(ValidationError) as exc_info:
            position_service.apply_buy(db, sample_user.id, "AAPL", D(quantity), D(price), fees=D(fees))

        assert exc_info.value.field == field
        assert _transactions(db) == []

    def test_buy_into_foreign_list_rejected(self, db, position_service, sample_user):
        other = create_user(db, email="other@example.com")
        their_list = create_list(db, other, name="Theirs")

        with pytest.raises(ListNotFoundError):
            position_service.apply_buy(db, sample_user.id, "AAPL", D("1"), D("1"), list_id=their_list.id)

    def test_failed_commit_leaves_no_partial_state(self, db, position_service, sample_user, monkeypatch):
        """Position change and transaction row are written together or not at all."""
        position = create_position(db, sample_user, symbol="AAPL", quantity="10", purchase_price="100")

        def failing_commit():
            raise RuntimeError("database went away")

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(RuntimeError):
            position_service.apply_buy(db, sample_user.id, "AAPL", D("10"), D("200"))

        db.refresh(position)
        assert position.quantity == D("10")
        assert position.purchase_price == D("100")
        assert _transactions(db) == []


# =============================================================================
# SELL
# =============================================================================

class TestApplySell:

    @pytest.fixture
    def aapl(self, db, position_service, sample_user) -> Position:
        position_service.apply_buy(db, sample_user.id, "AAPL", D("10"), D("150"))
        return position_service.apply_buy(db, sample_user.id, "AAPL", D("10"), D("160"))

    def test_partial_sell_keeps_average_cost(self, db, position_service, sample_user, aapl):
        txn = position_service.apply_sell(db, sample_user.id, aapl.id, D("5"), D("170"))

        position = position_service.get_position(db, sample_user.id, aapl.id)
        assert position.quantity == D("15")
        assert position.purchase_price == D("155")
        assert txn.transaction_type == TransactionType.SELL
        assert txn.quantity == D("5")
        assert txn.price == D("170")
        assert txn.symbol == "AAPL"

    def test_full_sell_removes_position_but_keeps_history(self, db, position_service, sample_user, aapl):
        position_service.apply_sell(db, sample_user.id, aapl.id, D("5"), D("170"))
        position_service.apply_sell(db, sample_user.id, aapl.id, D("15"), D("180"))

        assert position_service.list_positions(db, sample_user.id) == []
        with pytest.raises(PositionNotFoundError):
            position_service.get_position(db, sample_user.id, aapl.id)

        history = position_service.list_transactions(db, sample_user.id, symbol="AAPL")
        kinds = sorted(t.transaction_type.value for t in history)
        assert kinds == ["buy", "buy", "sell", "sell"]

    def test_insufficient_shares_names_position_and_quantities(self, db, position_service, sample_user, aapl):
        with pytest.raises(InsufficientSharesError) as exc_info:
            position_service.apply_sell(db, sample_user.id, aapl.id, D("21"), D("170"))

        error = exc_info.value
        assert error.symbol == "AAPL"
        assert error.position_id == aapl.id
        assert error.requested == D("21")
        assert error.available == D("20")

        assert position_service.get_position(db, sample_user.id, aapl.id).quantity == D("20")
        assert len(_transactions(db)) == 2

    def test_sell_inherits_position_list(self, db, position_service, sample_user):
        growth = create_list(db, sample_user, name="Growth")
        position = position_service.apply_buy(db, sample_user.id, "NVDA", D("4"), D("100"), list_id=growth.id)

        txn = position_service.apply_sell(db, sample_user.id, position.id, D("1"), D("120"))

        assert txn.list_id == growth.id

    def test_sell_of_someone_elses_position_is_not_found(self, db, position_service, sample_user, aapl):
        other = create_user(db, email="other@example.com")

        with pytest.raises(PositionNotFoundError):
            position_service.apply_sell(db, other.id, aapl.id, D("1"), D("170"))

    def test_fees_are_recorded(self, db, position_service, sample_user, aapl):
        txn = position_service.apply_sell(
            db, sample_user.id, aapl.id, D("1"), D("170"), fees=D("4.95"), notes="trim",
        )

        assert txn.fees == D("4.95")
        assert txn.notes == "trim"


# =============================================================================
# RECORD TRANSACTION
# =============================================================================

class TestRecordTransaction:

    def test_buy_returns_transaction(self, db, position_service, sample_user):
        txn = position_service.record_transaction(
            db, sample_user.id, "AMZN", TransactionType.BUY, D("3"), D("100"),
        )

        assert txn.transaction_type == TransactionType.BUY
        assert position_service.find_position(db, sample_user.id, "AMZN", None).quantity == D("3")

    def test_sell_applies_to_matching_position(self, db, position_service, sample_user):
        position_service.apply_buy(db, sample_user.id, "AMZN", D("3"), D("100"))

        position_service.record_transaction(
            db, sample_user.id, "amzn", TransactionType.SELL, D("1"), D("120"),
        )

        assert position_service.find_position(db, sample_user.id, "AMZN", None).quantity == D("2")

    def test_sell_without_position_is_not_found(self, db, position_service, sample_user):
        with pytest.raises(PositionNotFoundError) as exc_info:
            position_service.record_transaction(
                db, sample_user.id, "AMZN", TransactionType.SELL, D("1"), D("120"),
            )

        assert exc_info.value.resource_id == "AMZN"


# =============================================================================
# ADD / BULK ADD / UPDATE / DELETE
# =============================================================================

class TestAddStock:

    def test_owned_stock_after_symbol_validation(self, db, mock_provider, position_service, sample_user):
        mock_provider.add_price("AAPL", "150")

        position = position_service.add_stock(
            db, sample_user.id,
            StockItem(symbol="aapl", quantity=D("5"), purchase_price=D("140"), purchase_date=date(2025, 6, 1)),
        )

        assert position.symbol == "AAPL"
        assert position.is_watch_only is False
        assert position.purchase_date == date(2025, 6, 1)

    def test_watch_only_stock_drops_purchase_fields(self, db, mock_provider, position_service, sample_user):
        mock_provider.add_price("TSLA", "250")

        position = position_service.add_stock(
            db, sample_user.id, StockItem(symbol="TSLA", purchase_price=D("999")),
        )

        assert position.is_watch_only is True
        assert position.purchase_price is None
        assert position.purchase_date is None

    def test_unknown_symbol_rejected(self, db, position_service, sample_user):
        with pytest.raises(ValidationError) as exc_info:
            position_service.add_stock(db, sample_user.id, StockItem(symbol="NOPE"))

        assert exc_info.value.field == "symbol"

    def test_owned_stock_requires_price(self, db, position_service, sample_user):
        with pytest.raises(ValidationError) as exc_info:
            position_service.add_stock(
                db, sample_user.id, StockItem(symbol="AAPL", quantity=D("1")), validate_symbol=False,
            )

        assert exc_info.value.field == "purchase_price"

    def test_duplicate_in_same_list_rejected(self, db, position_service, sample_user):
        item = StockItem(symbol="AAPL")
        position_service.add_stock(db, sample_user.id, item, validate_symbol=False)

        with pytest.raises(DuplicatePositionError):
            position_service.add_stock(db, sample_user.id, item, validate_symbol=False)

    def test_symbol_too_long_rejected(self, db, position_service, sample_user):
        with pytest.raises(ValidationError):
            position_service.add_stock(db, sample_user.id, StockItem(symbol="ABCDEFGHIJK"), validate_symbol=False)


class TestBulkAdd:

    def test_collects_failures_per_item(self, db, mock_provider, position_service, sample_user):
        mock_provider.add_price("AAPL", "150")
        mock_provider.add_price("MSFT", "400")

        result = position_service.bulk_add(db, sample_user.id, [
            StockItem(symbol="AAPL", quantity=D("1"), purchase_price=D("100")),
            StockItem(symbol="NOPE"),
            StockItem(symbol="MSFT"),
            StockItem(symbol="AAPL"),
        ])

        assert [p.symbol for p in result.successful] == ["AAPL", "MSFT"]
        assert [item.symbol for item, _ in result.failed] == ["NOPE", "AAPL"]
        assert "already tracked" in result.failed[1][1]

    def test_empty_batch_rejected(self, db, position_service, sample_user):
        with pytest.raises(ValidationError) as exc_info:
            position_service.bulk_add(db, sample_user.id, [])

        assert exc_info.value.field == "items"

    def test_oversized_batch_rejected(self, db, position_service, sample_user):
        items = [StockItem(symbol=f"S{i}") for i in range(101)]

        with pytest.raises(ValidationError):
            position_service.bulk_add(db, sample_user.id, items, validate_symbols=False)

        assert position_service.list_positions(db, sample_user.id) == []


class TestUpdateAndDelete:

    def test_update_fields(self, db, position_service, sample_user):
        position = create_position(db, sample_user, quantity="10", purchase_price="100")
        target = create_list(db, sample_user, name="Core")

        updated = position_service.update_position(
            db, sample_user.id, position.id,
            quantity=D("12"), purchase_price=D("105"), purchase_date=date(2024, 5, 5), list_id=target.id,
        )

        assert updated.quantity == D("12")
        assert updated.purchase_price == D("105")
        assert updated.purchase_date == date(2024, 5, 5)
        assert updated.list_id == target.id

    def test_owning_a_watched_entry_requires_price(self, db, position_service, sample_user):
        position = create_position(db, sample_user, quantity="0", purchase_price=None)

        with pytest.raises(ValidationError):
            position_service.update_position(db, sample_user.id, position.id, quantity=D("3"))

    def test_negative_quantity_rejected(self, db, position_service, sample_user):
        position = create_position(db, sample_user)

        with pytest.raises(ValidationError):
            position_service.update_position(db, sample_user.id, position.id, quantity=D("-1"))

    def test_delete_keeps_transactions(self, db, position_service, sample_user):
        position = position_service.apply_buy(db, sample_user.id, "AAPL", D("1"), D("100"))

        position_service.delete_position(db, sample_user.id, position.id)

        assert position_service.list_positions(db, sample_user.id) == []
        [txn] = position_service.list_transactions(db, sample_user.id)
        assert txn.symbol == "AAPL"


# =============================================================================
# QUERIES
# =============================================================================

class TestQueries:

    def test_list_positions_filters_by_list(self, db, position_service, sample_user):
        core = create_list(db, sample_user, name="Core")
        create_position(db, sample_user, symbol="AAPL", list_id=core.id)
        create_position(db, sample_user, symbol="MSFT")

        assert [p.symbol for p in position_service.list_positions(db, sample_user.id, core.id)] == ["AAPL"]
        assert len(position_service.list_positions(db, sample_user.id)) == 2

    def test_list_positions_newest_first(self, db, position_service, sample_user):
        create_position(db, sample_user, symbol="AAPL")
        create_position(db, sample_user, symbol="MSFT")

        assert [p.symbol for p in position_service.list_positions(db, sample_user.id)] == ["MSFT", "AAPL"]

    def test_transactions_newest_first(self, db, position_service, sample_user):
        position_service.apply_buy(
            db, sample_user.id, "AAPL", D("1"), D("100"), date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        position_service.apply_buy(
            db, sample_user.id, "AAPL", D("1"), D("110"), date=datetime(2025, 6, 1, tzinfo=timezone.utc),
        )

        prices = [t.price for t in position_service.list_transactions(db, sample_user.id)]
        assert prices == [D("110"), D("100")]


class TestPositionSummary:

    def _trade(self, db, position_service, user):
        position = position_service.apply_buy(db, user.id, "AAPL", D("10"), D("100"))
        position_service.apply_buy(db, user.id, "AAPL", D("10"), D("200"))
        position_service.apply_sell(db, user.id, position.id, D("5"), D("180"))

    def test_realized_and_unrealized(self, db, mock_provider, position_service, sample_user):
        mock_provider.add_price("AAPL", "160")
        self._trade(db, position_service, sample_user)

        summary = position_service.position_summary(db, sample_user.id, "aapl")

        assert summary.transaction_count == 3
        assert summary.total_bought == D("20")
        assert summary.total_sold == D("5")
        assert summary.current_quantity == D("15")
        assert summary.average_buy_price == D("150.00")
        assert summary.average_sell_price == D("180.00")
        assert summary.realized_gain_loss == D("150.00")
        assert summary.unrealized_gain_loss == D("150.00")
        assert summary.total_return == D("300.00")
        assert summary.total_return_percent == D("10.00")

    def test_quote_failure_blanks_unrealized_only(self, db, mock_provider, position_service, sample_user):
        mock_provider.add_error("AAPL", ProviderUnavailableError("mock"))
        self._trade(db, position_service, sample_user)

        summary = position_service.position_summary(db, sample_user.id, "AAPL")

        assert summary.realized_gain_loss == D("150.00")
        assert summary.unrealized_gain_loss is None
        assert summary.total_return_percent is None
