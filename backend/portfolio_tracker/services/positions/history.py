# backend/portfolio_tracker/services/positions/history.py
"""
Trade history roll-up for a single symbol.

Works purely from the immutable transaction log, so it still answers after
the position itself was closed and deleted:

    average_buy_price  = bought value / bought quantity
    realized_gain_loss = sold value - sold quantity * average_buy_price - fees
    unrealized         = open quantity * (current price - average_buy_price)
    total_return %     = (realized + unrealized) / bought value * 100
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from portfolio_tracker.models import Transaction, TransactionType
from portfolio_tracker.services.constants import MONEY_QUANTUM, PERCENT_QUANTUM

_ZERO = Decimal("0")


@dataclass(frozen=True)
class TradeSummary:
    """
    Buy/sell statistics for one symbol.

    unrealized_gain_loss, total_return and total_return_percent are None
    when shares are still open but no current price was available.
    """
    symbol: str
    transaction_count: int
    total_bought: Decimal
    total_sold: Decimal
    current_quantity: Decimal
    average_buy_price: Decimal
    average_sell_price: Decimal | None
    total_fees: Decimal
    realized_gain_loss: Decimal
    unrealized_gain_loss: Decimal | None
    total_return: Decimal | None
    total_return_percent: Decimal | None


def summarize_trades(
        symbol: str,
        transactions: Iterable[Transaction],
        current_price: Decimal | None,
) -> TradeSummary:
    """
    Summarize a symbol's transactions.

    Args:
        symbol: Ticker the transactions belong to
        transactions: Buy and sell records (any order)
        current_price: Latest price, or None if it could not be fetched
    """
    bought = sold = bought_value = sold_value = fees = _ZERO
    count = 0

    for txn in transactions:
        count += 1
        fees += txn.fees or _ZERO
        if txn.transaction_type == TransactionType.BUY:
            bought += txn.quantity
            bought_value += txn.quantity * txn.price
        else:
            sold += txn.quantity
            sold_value += txn.quantity * txn.price

    current_quantity = bought - sold
    average_buy = bought_value / bought if bought > 0 else _ZERO
    average_sell = sold_value / sold if sold > 0 else None

    realized = sold_value - sold * average_buy - fees

    if current_quantity <= 0:
        unrealized: Decimal | None = _ZERO
    elif current_price is None:
        unrealized = None
    else:
        unrealized = current_quantity * (current_price - average_buy)

    if unrealized is None:
        total_return = None
        total_return_percent = None
    else:
        total_return = realized + unrealized
        if bought_value > 0:
            total_return_percent = _pct(total_return / bought_value * 100)
        else:
            total_return_percent = _ZERO

    return TradeSummary(
        symbol=symbol,
        transaction_count=count,
        total_bought=bought,
        total_sold=sold,
        current_quantity=current_quantity,
        average_buy_price=_money(average_buy),
        average_sell_price=_money(average_sell) if average_sell is not None else None,
        total_fees=_money(fees),
        realized_gain_loss=_money(realized),
        unrealized_gain_loss=_money(unrealized) if unrealized is not None else None,
        total_return=_money(total_return) if total_return is not None else None,
        total_return_percent=total_return_percent,
    )


def _money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _pct(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
