# backend/portfolio_tracker/services/recommendations/rules.py
"""
Rule-based buy/sell/diversify heuristics.

All functions are pure and work on StockSignals. A missing input never
triggers a rule: a stock without a P/E is neither cheap nor expensive.

Buy (all of):   P/E < 25, earnings growth > 10%, ROIC > 10%, price > MA50
Sell (any of):  P/E > 40, earnings growth < 0%, ROIC < 5%, price < 0.9 * MA50
Diversify:      any sector above 40% of the valued holdings
"""

from decimal import Decimal, ROUND_HALF_UP

from portfolio_tracker.services.constants import (
    BASE_CONFIDENCE,
    BUY_MAX_PE,
    BUY_MIN_EARNINGS_GROWTH,
    BUY_MIN_ROIC,
    DEFAULT_SECTOR_WEIGHT,
    DIVERSIFY_CONFIDENCE,
    MAX_SIGNAL_CONFIDENCE,
    PERCENT_QUANTUM,
    PRIORITY_WEIGHTS,
    REBALANCE_THRESHOLD_PERCENT,
    RECOMMENDED_SECTOR_WEIGHTS,
    SECTOR_CONCENTRATION_LIMIT,
    SELL_MA_BREAK_RATIO,
    SELL_MAX_EARNINGS_GROWTH,
    SELL_MAX_ROIC,
    SELL_MIN_PE,
)
from portfolio_tracker.services.recommendations.types import (
    BuyRecommendation,
    DiversifyRecommendation,
    RebalanceAction,
    Recommendation,
    SectorAllocation,
    SellRecommendation,
    StockSignals,
    TradeAction,
)

_HUNDRED = Decimal("100")


def _pct(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def _above_moving_average(s: StockSignals) -> bool:
    return (
        s.current_price is not None
        and s.moving_average_50_day is not None
        and s.current_price > s.moving_average_50_day
    )


def _broke_moving_average(s: StockSignals) -> bool:
    return (
        s.current_price is not None
        and s.moving_average_50_day is not None
        and s.current_price < s.moving_average_50_day * SELL_MA_BREAK_RATIO
    )


# =============================================================================
# PER-STOCK SIGNALS
# =============================================================================

def should_buy(s: StockSignals) -> bool:
    return (
        s.pe_ratio is not None and s.pe_ratio < BUY_MAX_PE
        and s.earnings_growth is not None and s.earnings_growth > BUY_MIN_EARNINGS_GROWTH
        and s.roic is not None and s.roic > BUY_MIN_ROIC
        and _above_moving_average(s)
    )


def should_sell(s: StockSignals) -> bool:
    return (
        (s.pe_ratio is not None and s.pe_ratio > SELL_MIN_PE)
        or (s.earnings_growth is not None and s.earnings_growth < SELL_MAX_EARNINGS_GROWTH)
        or (s.roic is not None and s.roic < SELL_MAX_ROIC)
        or _broke_moving_average(s)
    )


def buy_confidence(s: StockSignals) -> int:
    confidence = BASE_CONFIDENCE
    if s.pe_ratio is not None and s.pe_ratio < 20:
        confidence += 15
    if s.earnings_growth is not None and s.earnings_growth > 15:
        confidence += 15
    if s.roic is not None and s.roic > 15:
        confidence += 10
    if _above_moving_average(s):
        confidence += 10
    return min(MAX_SIGNAL_CONFIDENCE, confidence)


def sell_confidence(s: StockSignals) -> int:
    confidence = BASE_CONFIDENCE
    if s.pe_ratio is not None and s.pe_ratio > 50:
        confidence += 20
    if s.earnings_growth is not None and s.earnings_growth < -10:
        confidence += 20
    if s.roic is not None and s.roic < SELL_MAX_ROIC:
        confidence += 10
    return min(MAX_SIGNAL_CONFIDENCE, confidence)


def buy_reasoning(s: StockSignals) -> list[str]:
    reasons = []
    if s.pe_ratio is not None and s.pe_ratio < BUY_MAX_PE:
        reasons.append("Attractive P/E ratio compared to market average")
    if s.earnings_growth is not None and s.earnings_growth > BUY_MIN_EARNINGS_GROWTH:
        reasons.append(f"Strong earnings growth rate of {s.earnings_growth:.1f}%")
    if s.roic is not None and s.roic > BUY_MIN_ROIC:
        reasons.append(f"Excellent ROIC of {s.roic:.1f}%")
    if _above_moving_average(s):
        reasons.append("Trading above 50-day moving average")
    return reasons or ["Strong fundamental and technical indicators"]


def sell_reasoning(s: StockSignals) -> list[str]:
    reasons = []
    if s.pe_ratio is not None and s.pe_ratio > SELL_MIN_PE:
        reasons.append("P/E ratio significantly above industry average")
    if s.earnings_growth is not None and s.earnings_growth < SELL_MAX_EARNINGS_GROWTH:
        reasons.append("Declining earnings growth")
    if s.roic is not None and s.roic < SELL_MAX_ROIC:
        reasons.append("Poor return on invested capital")
    if _broke_moving_average(s):
        reasons.append("Trading significantly below 50-day moving average")
    return reasons or ["Concerning fundamental and technical indicators"]


def evaluate_stock(s: StockSignals) -> Recommendation | None:
    """
    At most one signal per stock; a buy wins when both rules fire.
    """
    if should_buy(s):
        return BuyRecommendation(s.symbol, buy_confidence(s), buy_reasoning(s))
    if should_sell(s):
        return SellRecommendation(s.symbol, sell_confidence(s), sell_reasoning(s))
    return None


# =============================================================================
# PORTFOLIO-LEVEL ANALYSIS
# =============================================================================

def sector_values(stocks: list[StockSignals]) -> dict[str, Decimal]:
    """Market value per sector over holdings that have both a sector and a value."""
    totals: dict[str, Decimal] = {}
    for s in stocks:
        if s.sector and s.value:
            totals[s.sector] = totals.get(s.sector, Decimal("0")) + s.value
    return totals


def concentration_alerts(stocks: list[StockSignals]) -> list[DiversifyRecommendation]:
    totals = sector_values(stocks)
    portfolio_value = sum(totals.values(), Decimal("0"))
    if portfolio_value <= 0:
        return []

    alerts = []
    for sector, value in totals.items():
        percent = _pct(value / portfolio_value * _HUNDRED)
        if percent > SECTOR_CONCENTRATION_LIMIT:
            alerts.append(DiversifyRecommendation(sector, percent, DIVERSIFY_CONFIDENCE))
    return alerts


def sector_allocation(stocks: list[StockSignals]) -> list[SectorAllocation]:
    totals = sector_values(stocks)
    portfolio_value = sum(totals.values(), Decimal("0"))
    if portfolio_value <= 0:
        return []
    return [
        SectorAllocation(
            sector=sector,
            percent=_pct(value / portfolio_value * _HUNDRED),
            recommended_percent=RECOMMENDED_SECTOR_WEIGHTS.get(sector, DEFAULT_SECTOR_WEIGHT),
        )
        for sector, value in totals.items()
    ]


def risk_score(stocks: list[StockSignals]) -> int:
    """1-10, higher is riskier: few sectors and few holdings add risk."""
    sectors = {s.sector for s in stocks if s.sector}
    score = 5
    if len(sectors) < 3:
        score += 2
    if len(sectors) < 5:
        score += 1
    if len(stocks) < 10:
        score += 1
    if len(stocks) < 5:
        score += 1
    return min(10, score)


def diversification_score(stocks: list[StockSignals]) -> int:
    """1-10, higher is better diversified."""
    sectors = {s.sector for s in stocks if s.sector}
    score = 5
    if len(sectors) >= 8:
        score += 3
    elif len(sectors) >= 5:
        score += 2
    elif len(sectors) >= 3:
        score += 1

    if len(stocks) >= 20:
        score += 2
    elif len(stocks) >= 10:
        score += 1
    return min(10, score)


def rebalancing_actions(stocks: list[StockSignals]) -> list[RebalanceAction]:
    """
    Equal-weight rebalancing.

    Each valued holding targets 100 / n percent, n being the number of
    stocks analyzed. Drifts beyond REBALANCE_THRESHOLD_PERCENT produce an
    action sized as drift% of the shares held, rounded to whole shares.
    """
    portfolio_value = sum((s.value for s in stocks if s.value), Decimal("0"))
    if portfolio_value <= 0:
        return []

    target = _HUNDRED / len(stocks)
    actions = []
    for s in stocks:
        if not s.value:
            continue
        current = s.value / portfolio_value * _HUNDRED
        drift = current - target
        if abs(drift) <= REBALANCE_THRESHOLD_PERCENT:
            continue
        actions.append(RebalanceAction(
            symbol=s.symbol,
            current_percent=_pct(current),
            target_percent=_pct(target),
            action=TradeAction.SELL if drift > 0 else TradeAction.BUY,
            quantity=(abs(drift) / _HUNDRED * s.quantity).quantize(Decimal("1"), rounding=ROUND_HALF_UP),
        ))
    return actions


def sort_recommendations(recommendations: list[Recommendation]) -> list[Recommendation]:
    """Highest priority weight times confidence first; ties keep their order."""
    return sorted(
        recommendations,
        key=lambda r: PRIORITY_WEIGHTS[r.priority.value] * r.confidence,
        reverse=True,
    )
