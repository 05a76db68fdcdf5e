# backend/portfolio_tracker/services/constants.py
"""
Centralized constants for the portfolio tracker services.

Single source of truth for the numeric rules used by the market data layer,
the position and performance calculators, and the recommendation heuristics.

Usage:
    from portfolio_tracker.services.constants import (
        DAYS_PER_YEAR,
        MIN_HOLDING_YEARS,
        MOVING_AVERAGE_WINDOW,
    )
"""

from decimal import Decimal


# =============================================================================
# ROUNDING
# =============================================================================

# Money and percentages are reported with two decimal places
MONEY_QUANTUM: Decimal = Decimal("0.01")
PERCENT_QUANTUM: Decimal = Decimal("0.01")

# Stored prices and quantities keep 8 decimal places (Numeric(18, 8))
STORAGE_QUANTUM: Decimal = Decimal("0.00000001")


# =============================================================================
# HOLDING PERIOD / ANNUALIZATION
# =============================================================================

# Average year length including leap years, for holding-period conversion
DAYS_PER_YEAR: float = 365.25

# Below this weighted holding period (~4 days) compounding to a yearly rate
# explodes, so the annualized return is reported as 0
MIN_HOLDING_YEARS: float = 0.01


# =============================================================================
# QUOTE DERIVED METRICS
# =============================================================================

# 50-day moving average: 85 calendar days of daily closes, at least 30 of them
MOVING_AVERAGE_WINDOW: int = 50
MOVING_AVERAGE_LOOKBACK_DAYS: int = 85
MOVING_AVERAGE_MIN_POINTS: int = 30

# Percent-change windows: (lookback in days, bar interval, minimum closes)
SIX_MONTH_WINDOW: tuple[int, str, int] = (180, "1d", 30)
ONE_YEAR_WINDOW: tuple[int, str, int] = (365, "1d", 100)
THREE_YEAR_WINDOW: tuple[int, str, int] = (3 * 365, "1wk", 10)

# One daily series covers the moving average and every daily window
DAILY_HISTORY_DAYS: int = max(MOVING_AVERAGE_LOOKBACK_DAYS, SIX_MONTH_WINDOW[0], ONE_YEAR_WINDOW[0])

# Peer symbols sampled per sector for the sector-average P/E
MAX_SECTOR_PEERS: int = 5


# =============================================================================
# INPUT LIMITS
# =============================================================================

MAX_BULK_ITEMS: int = 100
LIST_NAME_MAX_LENGTH: int = 50
SYMBOL_MAX_LENGTH: int = 10


# =============================================================================
# RECOMMENDATION HEURISTICS
# =============================================================================

# Buy signal: cheap, growing, efficient, in an uptrend
BUY_MAX_PE: Decimal = Decimal("25")
BUY_MIN_EARNINGS_GROWTH: Decimal = Decimal("10")
BUY_MIN_ROIC: Decimal = Decimal("10")

# Sell signal: any one of expensive, shrinking, inefficient, or below trend
SELL_MIN_PE: Decimal = Decimal("40")
SELL_MAX_EARNINGS_GROWTH: Decimal = Decimal("0")
SELL_MAX_ROIC: Decimal = Decimal("5")
SELL_MA_BREAK_RATIO: Decimal = Decimal("0.9")

BASE_CONFIDENCE: int = 50
MAX_SIGNAL_CONFIDENCE: int = 95
DIVERSIFY_CONFIDENCE: int = 90

# Sector weight above which a concentration warning is raised (percent)
SECTOR_CONCENTRATION_LIMIT: Decimal = Decimal("40")

# Rebalance when a holding drifts further than this from equal weight
REBALANCE_THRESHOLD_PERCENT: Decimal = Decimal("5")

PRIORITY_WEIGHTS: dict[str, int] = {"high": 3, "medium": 2, "low": 1}

# Target allocation per sector (percent of portfolio value)
RECOMMENDED_SECTOR_WEIGHTS: dict[str, Decimal] = {
    "Technology": Decimal("25"),
    "Healthcare": Decimal("15"),
    "Financial Services": Decimal("15"),
    "Consumer Cyclical": Decimal("15"),
    "Consumer Defensive": Decimal("10"),
    "Communication Services": Decimal("10"),
    "Industrials": Decimal("10"),
    "Energy": Decimal("5"),
    "Utilities": Decimal("5"),
    "Real Estate": Decimal("5"),
    "Materials": Decimal("5"),
}
DEFAULT_SECTOR_WEIGHT: Decimal = Decimal("5")


# =============================================================================
# RATE LIMITING
# =============================================================================

# slowapi limit strings ("N/period"), keyed by client IP
RATE_LIMIT_DEFAULT: str = "100/minute"
RATE_LIMIT_WRITE: str = "30/minute"
RATE_LIMIT_MARKET_DATA: str = "60/minute"
RATE_LIMIT_HEALTH: str = "300/minute"
