# backend/portfolio_tracker/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas.

Raise ValueError so Pydantic reports them as field errors (422).
"""

import re

from portfolio_tracker.services.constants import SYMBOL_MAX_LENGTH

# 1-10 chars: letters/digits, dots and dashes (BRK.B, BF-B), optional leading caret
SYMBOL_PATTERN = re.compile(r'^\^?[A-Z0-9][A-Z0-9.\-]{0,9}$')


def validate_symbol(value: str) -> str:
    """
    Validate and normalize a ticker symbol.

    Returns:
        Normalized symbol (uppercase, trimmed)

    Raises:
        ValueError: If the symbol format is invalid
    """
    if not value:
        raise ValueError("Symbol cannot be empty")

    normalized = value.strip().upper()

    if len(normalized) > SYMBOL_MAX_LENGTH:
        raise ValueError(f"Symbol cannot exceed {SYMBOL_MAX_LENGTH} characters")

    if not SYMBOL_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid symbol format: '{normalized}'. "
            "Symbol must be alphanumeric and may include dots (.) or dashes (-)"
        )

    return normalized
