# backend/portfolio_tracker/schemas/lists.py
"""
Pydantic schemas for portfolio lists.

Name length is checked here (1-50 characters) and again in the service,
which also enforces per-user uniqueness.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ListCreate(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="List name, unique per user",
        examples=["Retirement", "Watchlist"]
    )
    description: str | None = Field(default=None, max_length=500)
    is_default: bool = Field(
        default=False,
        description="Make this the default list (the first list always is)"
    )

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("List name cannot be blank")
        return v


class ListUpdate(BaseModel):
    """All fields optional; only sent fields are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=500)


class ListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: str | None
    is_default: bool
    created_at: datetime
    updated_at: datetime
