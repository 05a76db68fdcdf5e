# backend/portfolio_tracker/services/positions/service.py
"""
Position service: holdings, buys, sells and the transaction log.

A position is keyed by (user, symbol, list). Buys fold into it with a
weighted-average cost; sells only reduce its quantity and delete it once
nothing is left. Every buy and sell writes a Transaction in the same
database commit as the position change, or neither is written.

Watch-only entries (quantity 0) are created through add_stock and turn
into owned positions on their first buy.

Design Principles:
- No HTTP knowledge: raises ServiceError subclasses
- Validation before mutation: nothing is written for a rejected request
- Quote lookups go through the injected QuoteService

Usage:
    service = PositionService(quote_service)
    position = service.apply_buy(db, user_id=1, symbol="AAPL",
                                 quantity=Decimal("10"), price=Decimal("150"))
    sell = service.apply_sell(db, user_id=1, position_id=position.id,
                              quantity=Decimal("5"), price=Decimal("170"))
"""

import logging
from dataclasses import dataclass, field
from datetime import date as date_type, datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from portfolio_tracker.models import PortfolioList, Position, Transaction, TransactionType
from portfolio_tracker.services.constants import MAX_BULK_ITEMS, SYMBOL_MAX_LENGTH
from portfolio_tracker.services.exceptions import (
    DuplicatePositionError,
    InsufficientSharesError,
    ListNotFoundError,
    MarketDataError,
    PositionNotFoundError,
    ServiceError,
    ValidationError,
)
from portfolio_tracker.services.market_data.quotes import QuoteService
from portfolio_tracker.services.positions.history import TradeSummary, summarize_trades
from portfolio_tracker.services.valuation.calculators import weighted_average_cost

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


# =============================================================================
# INPUT / RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class StockItem:
    """One stock to add, as received by add_stock / bulk_add."""
    symbol: str
    quantity: Decimal = _ZERO
    purchase_price: Decimal | None = None
    purchase_date: date_type | None = None
    list_id: int | None = None


@dataclass
class BulkAddResult:
    successful: list[Position] = field(default_factory=list)
    failed: list[tuple[StockItem, str]] = field(default_factory=list)


# =============================================================================
# SERVICE
# =============================================================================

class PositionService:
    """
    Manages positions and the buy/sell transactions that move them.

    Args:
        quote_service: Used to validate new symbols and to price the
            unrealized part of a trade summary
    """

    def __init__(self, quote_service: QuoteService) -> None:
        self._quotes = quote_service

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_positions(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
    ) -> list[Position]:
        """The user's positions, newest first, optionally for one list."""
        query = select(Position).where(Position.user_id == user_id)
        if list_id is not None:
            query = query.where(Position.list_id == list_id)
        query = query.order_by(Position.created_at.desc(), Position.id.desc())
        return list(db.scalars(query).all())

    def get_position(self, db: Session, user_id: int, position_id: int) -> Position:
        position = db.get(Position, position_id)
        if position is None or position.user_id != user_id:
            raise PositionNotFoundError(position_id=position_id)
        return position

    def find_position(
            self,
            db: Session,
            user_id: int,
            symbol: str,
            list_id: int | None,
    ) -> Position | None:
        """Look up the position for (user, symbol, list); list_id None means "no list"."""
        query = select(Position).where(
            Position.user_id == user_id,
            Position.symbol == symbol,
        )
        if list_id is None:
            query = query.where(Position.list_id.is_(None))
        else:
            query = query.where(Position.list_id == list_id)
        return db.scalars(query.order_by(Position.id)).first()

    def list_transactions(
            self,
            db: Session,
            user_id: int,
            symbol: str | None = None,
            list_id: int | None = None,
    ) -> list[Transaction]:
        """The user's transactions, newest first."""
        query = select(Transaction).where(Transaction.user_id == user_id)
        if symbol is not None:
            query = query.where(Transaction.symbol == _normalize_symbol(symbol))
        if list_id is not None:
            query = query.where(Transaction.list_id == list_id)
        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
        return list(db.scalars(query).all())

    def position_summary(
            self,
            db: Session,
            user_id: int,
            symbol: str,
            list_id: int | None = None,
    ) -> TradeSummary:
        """
        Realized and unrealized results for one symbol from its transactions.

        A failed quote only blanks the unrealized figures.
        """
        symbol = _normalize_symbol(symbol)
        transactions = self.list_transactions(db, user_id, symbol=symbol, list_id=list_id)

        current_price = None
        try:
            current_price = self._quotes.get_quote(symbol).current_price
        except MarketDataError as e:
            logger.warning(f"No current price for {symbol} trade summary: {e}")

        return summarize_trades(symbol, transactions, current_price)

    # =========================================================================
    # STOCK ADD / EDIT
    # =========================================================================

    def add_stock(
            self,
            db: Session,
            user_id: int,
            item: StockItem,
            validate_symbol: bool = True,
    ) -> Position:
        """
        Start tracking a symbol, owned (quantity > 0) or watch-only (0).

        Raises:
            ValidationError: Bad symbol, negative quantity, or an owned
                position without a positive purchase price
            DuplicatePositionError: The symbol is already tracked in that list
            ListNotFoundError: list_id does not belong to the user
        """
        symbol = _normalize_symbol(item.symbol)
        quantity = item.quantity if item.quantity is not None else _ZERO
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative", field="quantity")
        if quantity > 0 and (item.purchase_price is None or item.purchase_price <= 0):
            raise ValidationError(
                "Purchase price must be greater than 0 for owned positions",
                field="purchase_price",
            )
        if item.list_id is not None:
            self._ensure_list_owned(db, user_id, item.list_id)
        if self.find_position(db, user_id, symbol, item.list_id) is not None:
            raise DuplicatePositionError(symbol, item.list_id)
        if validate_symbol:
            self._quotes.validate_symbol(symbol)

        owned = quantity > 0
        position = Position(
            user_id=user_id,
            list_id=item.list_id,
            symbol=symbol,
            quantity=quantity,
            purchase_price=item.purchase_price if owned else None,
            purchase_date=(item.purchase_date or date_type.today()) if owned else None,
        )
        db.add(position)
        db.commit()
        db.refresh(position)

        logger.info(
            f"Added {'position' if owned else 'watch-only entry'} {symbol} "
            f"for user {user_id} (quantity={quantity})"
        )
        return position

    def bulk_add(
            self,
            db: Session,
            user_id: int,
            items: list[StockItem],
            validate_symbols: bool = True,
    ) -> BulkAddResult:
        """
        Add up to MAX_BULK_ITEMS stocks, collecting per-item failures.

        Raises:
            ValidationError: Empty batch or more than MAX_BULK_ITEMS items
        """
        if not items:
            raise ValidationError("At least one item is required", field="items")
        if len(items) > MAX_BULK_ITEMS:
            raise ValidationError(
                f"Cannot add more than {MAX_BULK_ITEMS} items at once",
                field="items",
            )

        result = BulkAddResult()
        for item in items:
            try:
                result.successful.append(
                    self.add_stock(db, user_id, item, validate_symbol=validate_symbols)
                )
            except ServiceError as e:
                db.rollback()
                result.failed.append((item, str(e)))

        logger.info(
            f"Bulk add for user {user_id}: {len(result.successful)} added, "
            f"{len(result.failed)} failed"
        )
        return result

    def update_position(
            self,
            db: Session,
            user_id: int,
            position_id: int,
            quantity: Decimal | None = None,
            purchase_price: Decimal | None = None,
            purchase_date: date_type | None = None,
            list_id: int | None = None,
    ) -> Position:
        """
        Partially update a position.

        Raises:
            ValidationError: The result would be an owned position without a
                positive purchase price, or quantity is negative
        """
        position = self.get_position(db, user_id, position_id)

        new_quantity = quantity if quantity is not None else position.quantity
        new_price = purchase_price if purchase_price is not None else position.purchase_price

        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative", field="quantity")
        if purchase_price is not None and purchase_price <= 0:
            raise ValidationError("Purchase price must be greater than 0", field="purchase_price")
        if new_quantity > 0 and (new_price is None or new_price <= 0):
            raise ValidationError(
                "Purchase price must be greater than 0 for owned positions",
                field="purchase_price",
            )
        if list_id is not None:
            self._ensure_list_owned(db, user_id, list_id)
            position.list_id = list_id

        position.quantity = new_quantity
        position.purchase_price = new_price
        if purchase_date is not None:
            position.purchase_date = purchase_date
        elif new_quantity > 0 and position.purchase_date is None:
            position.purchase_date = date_type.today()

        db.commit()
        db.refresh(position)
        return position

    def delete_position(self, db: Session, user_id: int, position_id: int) -> None:
        """Stop tracking a position. Its transactions are kept."""
        position = self.get_position(db, user_id, position_id)
        db.delete(position)
        db.commit()
        logger.info(f"Deleted position {position_id} ({position.symbol}) for user {user_id}")

    # =========================================================================
    # BUY / SELL
    # =========================================================================

    def apply_buy(
            self,
            db: Session,
            user_id: int,
            symbol: str,
            quantity: Decimal,
            price: Decimal,
            date: datetime | None = None,
            list_id: int | None = None,
            fees: Decimal = _ZERO,
            notes: str | None = None,
    ) -> Position:
        """
        Buy shares, opening or adding to the (user, symbol, list) position.

            new_avg = (old_qty * old_avg + qty * price) / (old_qty + qty)

        Returns:
            The updated or newly created Position
        """
        position, _ = self._buy(db, user_id, symbol, quantity, price, date, list_id, fees, notes)
        return position

    def apply_sell(
            self,
            db: Session,
            user_id: int,
            position_id: int,
            quantity: Decimal,
            price: Decimal,
            date: datetime | None = None,
            fees: Decimal = _ZERO,
            notes: str | None = None,
    ) -> Transaction:
        """
        Sell shares out of a position.

        The average cost is left unchanged. A position sold down to exactly
        zero is deleted; the transaction log keeps its history.

        Raises:
            ValidationError: quantity or price not positive, fees negative
            PositionNotFoundError: Unknown position or not the user's
            InsufficientSharesError: quantity exceeds the shares held
        """
        _validate_trade(quantity, price, fees)
        position = self.get_position(db, user_id, position_id)

        if quantity > position.quantity:
            raise InsufficientSharesError(
                symbol=position.symbol,
                position_id=position.id,
                requested=quantity,
                available=position.quantity,
            )

        transaction = Transaction(
            user_id=user_id,
            list_id=position.list_id,
            symbol=position.symbol,
            transaction_type=TransactionType.SELL,
            quantity=quantity,
            price=price,
            fees=fees,
            notes=notes,
            date=date or _utcnow(),
        )
        remaining = position.quantity - quantity

        try:
            db.add(transaction)
            transaction.position = position
            if remaining == 0:
                db.delete(position)
            else:
                position.quantity = remaining
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(transaction)
        if remaining == 0:
            logger.info(f"Closed position {position_id} ({position.symbol}) for user {user_id}")
        else:
            logger.info(
                f"Sold {quantity} {position.symbol} from position {position_id}; "
                f"{remaining} remaining"
            )
        return transaction

    def record_transaction(
            self,
            db: Session,
            user_id: int,
            symbol: str,
            transaction_type: TransactionType,
            quantity: Decimal,
            price: Decimal,
            date: datetime | None = None,
            list_id: int | None = None,
            fees: Decimal = _ZERO,
            notes: str | None = None,
    ) -> Transaction:
        """
        Record a buy or sell by symbol.

        Buys go through the buy path; sells are applied to the position for
        (user, symbol, list).

        Raises:
            PositionNotFoundError: Selling a symbol with no position in the list
        """
        if transaction_type == TransactionType.BUY:
            _, transaction = self._buy(db, user_id, symbol, quantity, price, date, list_id, fees, notes)
            return transaction

        _validate_trade(quantity, price, fees)
        normalized = _normalize_symbol(symbol)
        position = self.find_position(db, user_id, normalized, list_id)
        if position is None:
            raise PositionNotFoundError(symbol=normalized)
        return self.apply_sell(db, user_id, position.id, quantity, price, date, fees, notes)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _buy(
            self,
            db: Session,
            user_id: int,
            symbol: str,
            quantity: Decimal,
            price: Decimal,
            date: datetime | None,
            list_id: int | None,
            fees: Decimal,
            notes: str | None,
    ) -> tuple[Position, Transaction]:
        symbol = _normalize_symbol(symbol)
        _validate_trade(quantity, price, fees)
        if list_id is not None:
            self._ensure_list_owned(db, user_id, list_id)

        trade_date = date or _utcnow()
        position = self.find_position(db, user_id, symbol, list_id)

        try:
            if position is None:
                position = Position(
                    user_id=user_id,
                    list_id=list_id,
                    symbol=symbol,
                    quantity=quantity,
                    purchase_price=price,
                    purchase_date=trade_date.date(),
                )
                db.add(position)
                opened = True
            else:
                held = position.quantity or _ZERO
                opened = held == 0
                position.purchase_price = weighted_average_cost(
                    held, position.purchase_price or _ZERO, quantity, price
                )
                position.quantity = held + quantity
                if opened or position.purchase_date is None:
                    position.purchase_date = trade_date.date()

            transaction = Transaction(
                user_id=user_id,
                list_id=list_id,
                symbol=symbol,
                transaction_type=TransactionType.BUY,
                quantity=quantity,
                price=price,
                fees=fees,
                notes=notes,
                date=trade_date,
            )
            db.add(transaction)
            transaction.position = position
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(position)
        db.refresh(transaction)
        logger.info(
            f"{'Opened' if opened else 'Added to'} {symbol} position {position.id} "
            f"for user {user_id}: {quantity} @ {price}, avg now {position.purchase_price}"
        )
        return position, transaction

    @staticmethod
    def _ensure_list_owned(db: Session, user_id: int, list_id: int) -> None:
        portfolio_list = db.get(PortfolioList, list_id)
        if portfolio_list is None or portfolio_list.user_id != user_id:
            raise ListNotFoundError(list_id)


def _normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValidationError("Symbol is required", field="symbol")
    if len(normalized) > SYMBOL_MAX_LENGTH:
        raise ValidationError(
            f"Symbol cannot be longer than {SYMBOL_MAX_LENGTH} characters",
            field="symbol",
        )
    return normalized


def _validate_trade(quantity: Decimal, price: Decimal, fees: Decimal) -> None:
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity must be greater than 0", field="quantity")
    if price is None or price <= 0:
        raise ValidationError("Price must be greater than 0", field="price")
    if fees is not None and fees < 0:
        raise ValidationError("Fees cannot be negative", field="fees")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
