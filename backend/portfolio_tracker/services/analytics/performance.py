# backend/portfolio_tracker/services/analytics/performance.py
"""
Portfolio-level performance figures.

Pure aggregation over valued holdings plus the ledger's net cash invested:

    total_value             sum of current values of owned, quoted holdings
    total_gain_loss         sum of their gains
    total_gain_loss_percent total_gain_loss / net cash invested * 100
    annualized_return       compounded yearly rate over the cost-weighted
                            average holding period
    time_based_returns      value-weighted 6M / 1Y / 3Y price changes
    item_count              every holding, watched ones included
    synthetic_quote_count   valued holdings priced from a placeholder quote

Two different bases are in play and are deliberately left as they are:
the headline percentage divides by net cash invested, while the holding
period used for annualization is weighted by each position's cost basis.

Nothing here raises on thin data: missing quotes or windows produce 0 or
None exactly as documented on each function.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from portfolio_tracker.services.constants import (
    DAYS_PER_YEAR,
    MIN_HOLDING_YEARS,
    MONEY_QUANTUM,
    PERCENT_QUANTUM,
)
from portfolio_tracker.services.market_data.types import ReturnWindow
from portfolio_tracker.services.valuation.types import OwnedHolding, ValuedHolding

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class TimeBasedReturns:
    """Value-weighted trailing returns in percent; None when no holding qualifies."""
    six_month: Decimal | None = None
    one_year: Decimal | None = None
    three_year: Decimal | None = None


@dataclass(frozen=True)
class PortfolioSummary:
    total_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    annualized_return: Decimal
    total_cash_invested: Decimal
    item_count: int
    time_based_returns: TimeBasedReturns = field(default_factory=TimeBasedReturns)
    synthetic_quote_count: int = 0


# =============================================================================
# CALCULATIONS
# =============================================================================

def summarize(
        holdings: list[ValuedHolding],
        cash_invested: Decimal,
        as_of: date | None = None,
) -> PortfolioSummary:
    """
    Roll valued holdings and net cash invested up into a PortfolioSummary.

    Args:
        holdings: Every holding of the portfolio, watched ones included
        cash_invested: Net cash invested from the cash ledger
        as_of: Valuation date for holding periods (default: today)

    Returns:
        PortfolioSummary
    """
    as_of = as_of or date.today()
    valued = [h for h in holdings if h.is_owned and h.valuation.is_valued]

    total_value = sum((h.valuation.current_value for h in valued), _ZERO)
    total_gain_loss = sum((h.valuation.gain_loss for h in valued), _ZERO)

    if cash_invested > 0:
        total_gain_loss_percent = _quantize_percent(total_gain_loss / cash_invested * _HUNDRED)
    else:
        total_gain_loss_percent = _ZERO

    summary = PortfolioSummary(
        total_value=total_value.quantize(MONEY_QUANTUM),
        total_gain_loss=total_gain_loss.quantize(MONEY_QUANTUM),
        total_gain_loss_percent=total_gain_loss_percent,
        annualized_return=annualized_return(holdings, total_gain_loss, cash_invested, as_of),
        total_cash_invested=cash_invested.quantize(MONEY_QUANTUM),
        item_count=len(holdings),
        time_based_returns=time_based_returns(holdings),
        synthetic_quote_count=sum(1 for h in valued if h.quote is not None and h.quote.is_synthetic),
    )

    logger.debug(
        f"Summarized {summary.item_count} holdings ({len(valued)} valued): "
        f"value={summary.total_value}, gain={summary.total_gain_loss}"
    )
    if summary.synthetic_quote_count:
        logger.warning(f"Summary totals include {summary.synthetic_quote_count} synthetic quote(s)")
    return summary


def weighted_holding_years(holdings: list[ValuedHolding], as_of: date) -> float | None:
    """
    Cost-weighted average holding period in years.

        sum(years_i * cost_i) / sum(cost_i)

    Only owned holdings with a purchase date and a positive cost count.
    Purchase dates in the future count as zero years.

    Returns:
        Average in years, or None when no holding qualifies
    """
    weighted_years = 0.0
    total_cost = 0.0

    for valued in holdings:
        holding = valued.holding
        if not isinstance(holding, OwnedHolding) or holding.purchase_date is None:
            continue
        cost = float(holding.cost_basis)
        if cost <= 0:
            continue
        years = max((as_of - holding.purchase_date).days, 0) / DAYS_PER_YEAR
        weighted_years += years * cost
        total_cost += cost

    if total_cost == 0:
        return None
    return weighted_years / total_cost


def annualized_return(
        holdings: list[ValuedHolding],
        total_gain_loss: Decimal,
        cash_invested: Decimal,
        as_of: date,
) -> Decimal:
    """
    Compound the cash-based return to a yearly rate.

        ((1 + gain / cash) ^ (1 / avg_years) - 1) * 100

    Returns 0 when there is no cash invested, no qualifying holding, an
    average holding period under MIN_HOLDING_YEARS, a total loss of
    capital or more (the base would be <= 0), or a result too large to
    represent.
    """
    if cash_invested <= 0:
        return _ZERO

    avg_years = weighted_holding_years(holdings, as_of)
    if avg_years is None or avg_years < MIN_HOLDING_YEARS:
        return _ZERO

    # Float only for the fractional power
    growth = 1.0 + float(total_gain_loss / cash_invested)
    if growth <= 0:
        logger.warning(f"Cannot annualize a growth factor of {growth:.4f}; reporting 0")
        return _ZERO

    try:
        rate = (growth ** (1.0 / avg_years) - 1.0) * 100.0
        return _quantize_percent(Decimal(str(rate)))
    except (OverflowError, InvalidOperation):
        logger.warning(f"Annualized return overflowed (growth={growth}, years={avg_years})")
        return _ZERO


def time_based_returns(holdings: list[ValuedHolding]) -> TimeBasedReturns:
    return TimeBasedReturns(
        six_month=window_return(holdings, ReturnWindow.SIX_MONTH),
        one_year=window_return(holdings, ReturnWindow.ONE_YEAR),
        three_year=window_return(holdings, ReturnWindow.THREE_YEAR),
    )


def window_return(holdings: list[ValuedHolding], window: ReturnWindow) -> Decimal | None:
    """
    Value-weighted average price change over a trailing window.

        sum(change_percent_i * value_i) / sum(value_i)

    Only owned holdings that have both a current value and a change for
    the window take part. None (not 0) when none qualify.
    """
    weighted = _ZERO
    total_value = _ZERO

    for valued in holdings:
        if not valued.is_owned or not valued.valuation.is_valued or valued.quote is None:
            continue
        change = valued.quote.change_for(window)
        if change is None:
            continue
        value = valued.valuation.current_value
        weighted += change.change_percent * value
        total_value += value

    if total_value == 0:
        return None
    return _quantize_percent(weighted / total_value)


def _quantize_percent(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
