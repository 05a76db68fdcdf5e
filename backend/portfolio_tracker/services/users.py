# backend/portfolio_tracker/services/users.py
"""
User service.

Users only carry an email and a display name. There are no credentials:
callers pass user_id explicitly and every other service scopes its
queries by it.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from portfolio_tracker.models import User
from portfolio_tracker.services.exceptions import (
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class UserService:

    def create_user(self, db: Session, email: str, name: str | None = None) -> User:
        """
        Register a user.

        Raises:
            ValidationError: Email is missing or malformed
            UserExistsError: Email already registered
        """
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationError("A valid email address is required", field="email")

        if db.scalars(select(User.id).where(User.email == email)).first() is not None:
            raise UserExistsError(email)

        user = User(email=email, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def delete_user(self, db: Session, user_id: int) -> None:
        """Delete a user and, by cascade, everything they own."""
        user = self.get_user(db, user_id)
        db.delete(user)
        db.commit()
        logger.info(f"Deleted user {user_id}")
