# backend/portfolio_tracker/utils/context.py
"""
Request-scoped context storage.

Holds the correlation ID of the request being served. contextvars keeps the
value isolated per request, both for async handlers and for sync handlers
that FastAPI runs in its threadpool.

Usage:
    from portfolio_tracker.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current request."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID at the end of a request."""
    _correlation_id_var.set(None)
