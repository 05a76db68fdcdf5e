# backend/portfolio_tracker/services/market_data/estimates.py
"""
Static estimate tables for fundamentals the provider does not return.

Used in two places:
- filling gaps in a live quote (e.g. no P/E reported for a symbol)
- building a synthetic quote when the provider is unreachable

Every lookup has a default, so callers never get None where the tables
promise a number. Growth and ROIC tables are fractions (0.08 = 8%); dividend
yields are already in percent.
"""

from decimal import Decimal

DEFAULT_SECTOR = "Technology"

# =============================================================================
# SECTORS
# =============================================================================

SYMBOL_SECTORS: dict[str, str] = {
    # Technology
    "AAPL": "Technology", "MSFT": "Technology", "GOOGL": "Technology",
    "GOOG": "Technology", "AMZN": "Technology", "TSLA": "Technology",
    "META": "Technology", "NFLX": "Technology", "NVDA": "Technology",
    "AMD": "Technology", "INTC": "Technology", "ORCL": "Technology",
    "CRM": "Technology", "ADBE": "Technology",
    # Healthcare
    "JNJ": "Healthcare", "UNH": "Healthcare", "PFE": "Healthcare",
    "ABBV": "Healthcare", "TMO": "Healthcare", "MRK": "Healthcare",
    "ABT": "Healthcare",
    # Financial Services
    "JPM": "Financial Services", "BAC": "Financial Services",
    "WFC": "Financial Services", "GS": "Financial Services",
    "MS": "Financial Services", "BRK.A": "Financial Services",
    "BRK.B": "Financial Services",
    # Consumer
    "WMT": "Consumer Defensive", "PG": "Consumer Defensive",
    "KO": "Consumer Defensive", "PEP": "Consumer Defensive",
    "COST": "Consumer Defensive",
    "HD": "Consumer Cyclical", "MCD": "Consumer Cyclical",
    "DIS": "Consumer Cyclical", "NKE": "Consumer Cyclical",
    "SBUX": "Consumer Cyclical",
    # Energy
    "XOM": "Energy", "CVX": "Energy", "COP": "Energy",
    # Funds
    "SPY": "Index Fund", "QQQ": "Index Fund", "VTI": "Index Fund",
}

# Peers sampled for the live sector-average P/E
SECTOR_PEERS: dict[str, list[str]] = {
    "Technology": ["AAPL", "MSFT", "GOOGL", "AMZN", "TSLA"],
    "Healthcare": ["JNJ", "UNH", "PFE", "ABBV", "TMO"],
    "Financial Services": ["JPM", "BAC", "WFC", "GS", "MS"],
    "Consumer Cyclical": ["HD", "MCD", "DIS", "NKE", "SBUX"],
    "Communication Services": ["META", "NFLX", "GOOGL", "DIS", "CMCSA"],
    "Industrials": ["BA", "CAT", "GE", "MMM", "UPS"],
    "Consumer Defensive": ["WMT", "PG", "KO", "PEP", "COST"],
    "Energy": ["XOM", "CVX", "COP", "EOG", "SLB"],
    "Utilities": ["NEE", "DUK", "SO", "AEP", "EXC"],
    "Real Estate": ["AMT", "PLD", "CCI", "EQIX", "SPG"],
    "Materials": ["LIN", "APD", "SHW", "FCX", "NUE"],
}

# =============================================================================
# VALUATION
# =============================================================================

SECTOR_PE: dict[str, Decimal] = {
    "Technology": Decimal("25"),
    "Healthcare": Decimal("22"),
    "Financial Services": Decimal("12"),
    "Consumer Cyclical": Decimal("18"),
    "Consumer Defensive": Decimal("20"),
    "Communication Services": Decimal("22"),
    "Industrials": Decimal("16"),
    "Energy": Decimal("14"),
    "Utilities": Decimal("18"),
    "Real Estate": Decimal("24"),
    "Materials": Decimal("15"),
}
DEFAULT_PE = Decimal("20")

COMPANY_PE: dict[str, Decimal] = {
    "AAPL": Decimal("28"), "MSFT": Decimal("39"), "GOOGL": Decimal("24"),
    "AMZN": Decimal("35"), "TSLA": Decimal("45"), "META": Decimal("22"),
    "NFLX": Decimal("28"), "NVDA": Decimal("40"),
}

# Percent; absent means "does not pay a dividend"
DIVIDEND_YIELDS: dict[str, Decimal] = {
    "AAPL": Decimal("0.50"), "MSFT": Decimal("0.72"), "JNJ": Decimal("3.0"),
    "PG": Decimal("2.5"), "KO": Decimal("3.2"), "PEP": Decimal("2.8"),
    "XOM": Decimal("5.5"), "CVX": Decimal("3.2"), "WMT": Decimal("1.7"),
    "HD": Decimal("2.4"), "MCD": Decimal("2.2"), "JPM": Decimal("2.8"),
    "BAC": Decimal("2.5"),
}

# =============================================================================
# GROWTH AND RETURNS (fractions)
# =============================================================================

EARNINGS_GROWTH: dict[str, Decimal] = {
    "AAPL": Decimal("0.08"), "MSFT": Decimal("0.12"), "GOOGL": Decimal("0.15"),
    "AMZN": Decimal("0.20"), "TSLA": Decimal("0.35"), "META": Decimal("0.10"),
    "NFLX": Decimal("0.18"), "NVDA": Decimal("0.25"),
}
DEFAULT_EARNINGS_GROWTH = Decimal("0.08")

SALES_GROWTH: dict[str, Decimal] = {
    "AAPL": Decimal("0.05"), "MSFT": Decimal("0.12"), "GOOGL": Decimal("0.15"),
    "AMZN": Decimal("0.18"), "TSLA": Decimal("0.30"), "META": Decimal("0.08"),
    "NFLX": Decimal("0.15"), "NVDA": Decimal("0.22"),
}
DEFAULT_SALES_GROWTH = Decimal("0.06")

ROIC: dict[str, Decimal] = {
    "AAPL": Decimal("0.28"), "MSFT": Decimal("0.25"), "GOOGL": Decimal("0.18"),
    "AMZN": Decimal("0.15"), "TSLA": Decimal("0.12"), "META": Decimal("0.22"),
    "NFLX": Decimal("0.08"), "NVDA": Decimal("0.20"),
}
DEFAULT_ROIC = Decimal("0.15")

# =============================================================================
# SYNTHETIC PRICES
# =============================================================================

SYNTHETIC_BASE_PRICES: dict[str, Decimal] = {
    "AAPL": Decimal("175"),
    "GOOGL": Decimal("2800"),
    "MSFT": Decimal("350"),
    "TSLA": Decimal("250"),
    "AMZN": Decimal("3100"),
}
DEFAULT_SYNTHETIC_PRICE = Decimal("100")


# =============================================================================
# LOOKUPS
# =============================================================================

def estimate_sector(symbol: str) -> str:
    return SYMBOL_SECTORS.get(symbol, DEFAULT_SECTOR)


def estimate_pe_ratio(symbol: str, sector: str | None = None) -> Decimal:
    """Company estimate first, then the sector table, then the market default."""
    if symbol in COMPANY_PE:
        return COMPANY_PE[symbol]
    return SECTOR_PE.get(sector or DEFAULT_SECTOR, DEFAULT_PE)


def sector_pe_fallback(sector: str) -> Decimal:
    return SECTOR_PE.get(sector, DEFAULT_PE)


def sector_peers(sector: str) -> list[str]:
    return SECTOR_PEERS.get(sector, [])


def estimate_dividend_yield(symbol: str) -> Decimal | None:
    return DIVIDEND_YIELDS.get(symbol)


def estimate_earnings_growth(symbol: str) -> Decimal:
    return EARNINGS_GROWTH.get(symbol, DEFAULT_EARNINGS_GROWTH)


def estimate_sales_growth(symbol: str) -> Decimal:
    return SALES_GROWTH.get(symbol, DEFAULT_SALES_GROWTH)


def estimate_roic(symbol: str) -> Decimal:
    return ROIC.get(symbol, DEFAULT_ROIC)


def synthetic_price(symbol: str) -> Decimal:
    return SYNTHETIC_BASE_PRICES.get(symbol, DEFAULT_SYNTHETIC_PRICE)
