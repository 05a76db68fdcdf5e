# backend/tests/services/test_user_service.py
"""Tests for UserService."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from portfolio_tracker.models import Position, Transaction
from portfolio_tracker.services.exceptions import (
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)
from portfolio_tracker.services.users import UserService


@pytest.fixture
def users() -> UserService:
    return UserService()


class TestUserService:

    def test_create_normalizes_email(self, db, users):
        user = users.create_user(db, "  Jane@Example.COM ", name="Jane")

        assert user.id is not None
        assert user.email == "jane@example.com"
        assert users.get_user(db, user.id).name == "Jane"

    def test_duplicate_email_rejected(self, db, users):
        users.create_user(db, "jane@example.com")

        with pytest.raises(UserExistsError):
            users.create_user(db, "JANE@example.com")

    @pytest.mark.parametrize("email", ["", "not-an-email"])
    def test_invalid_email_rejected(self, db, users, email):
        with pytest.raises(ValidationError) as exc_info:
            users.create_user(db, email)

        assert exc_info.value.field == "email"

    def test_unknown_user(self, db, users):
        with pytest.raises(UserNotFoundError):
            users.get_user(db, 999)

    def test_delete_removes_owned_rows(self, db, users, position_service):
        user = users.create_user(db, "jane@example.com")
        position_service.apply_buy(db, user.id, "AAPL", Decimal("1"), Decimal("100"))

        users.delete_user(db, user.id)

        with pytest.raises(UserNotFoundError):
            users.get_user(db, user.id)
        assert db.scalars(select(Position)).all() == []
        assert db.scalars(select(Transaction)).all() == []
