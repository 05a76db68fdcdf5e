# backend/tests/schemas/test_positions.py
"""
Tests for position, list and user schemas and the shared symbol validator.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from portfolio_tracker.schemas.lists import ListCreate
from portfolio_tracker.schemas.positions import BulkPositionCreate, PositionCreate
from portfolio_tracker.schemas.users import UserCreate
from portfolio_tracker.schemas.validators import validate_symbol


class TestValidateSymbol:

    @pytest.mark.parametrize("raw,expected", [
        ("aapl", "AAPL"),
        (" msft ", "MSFT"),
        ("brk.b", "BRK.B"),
        ("BF-B", "BF-B"),
        ("^gspc", "^GSPC"),
    ])
    def test_normalizes(self, raw, expected):
        assert validate_symbol(raw) == expected

    @pytest.mark.parametrize("raw", ["", "AB$C", "-ABC", "TOOLONGSYMBOL", "A B"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            validate_symbol(raw)


class TestPositionCreate:

    def test_defaults_to_watch_only(self):
        data = PositionCreate(symbol="tsla")

        assert data.symbol == "TSLA"
        assert data.quantity == Decimal("0")
        assert data.purchase_price is None

    def test_owned_requires_price(self):
        with pytest.raises(ValidationError) as exc_info:
            PositionCreate(symbol="AAPL", quantity="10")

        assert "purchase_price is required" in str(exc_info.value)

    def test_owned_with_price(self):
        data = PositionCreate(symbol="AAPL", quantity="10", purchase_price="150.25")

        assert data.purchase_price == Decimal("150.25")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            PositionCreate(symbol="AAPL", quantity="-1", purchase_price="1")

    def test_bulk_limits(self):
        with pytest.raises(ValidationError):
            BulkPositionCreate(items=[])

        with pytest.raises(ValidationError):
            BulkPositionCreate(items=[{"symbol": "AAPL"}] * 101)

        assert len(BulkPositionCreate(items=[{"symbol": "AAPL"}] * 100).items) == 100


class TestListCreate:

    def test_name_is_trimmed(self):
        assert ListCreate(name="  Growth  ").name == "Growth"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            ListCreate(name=name)


class TestUserCreate:

    def test_accepts_email(self):
        assert UserCreate(email="jane@example.com").email == "jane@example.com"

    @pytest.mark.parametrize("email", ["jane", "jane@", "ja ne@example.com"])
    def test_rejects_bad_email(self, email):
        with pytest.raises(ValidationError):
            UserCreate(email=email)
