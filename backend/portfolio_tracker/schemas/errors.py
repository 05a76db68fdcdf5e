# backend/portfolio_tracker/schemas/errors.py
"""
Pydantic schemas for error responses.

Every error leaves the API in the same shape. Used by the exception
handlers in main.py.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error response format."""

    error: str = Field(
        ...,
        description="Error type/code (e.g., 'InsufficientSharesError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Used for request validation errors (422 responses)."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="List of validation errors"
    )
