# backend/portfolio_tracker/utils/__init__.py
"""Utility modules: logging setup and request context."""

from portfolio_tracker.utils.logging import setup_logging
from portfolio_tracker.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
