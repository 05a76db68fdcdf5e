# backend/portfolio_tracker/services/lists.py
"""
List service: named groupings of a user's positions, transactions and
cash flows.

Rules:
- Names are 1-50 characters and unique per user
- Exactly one list per user is the default; the first list created
  becomes the default
- The default list cannot be deleted
- Deleting any other list moves its positions to the default list (or to
  no list when there is none); its transactions and cash flows keep their
  history with the list reference cleared
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from portfolio_tracker.models import CashFlow, PortfolioList, Position, Transaction
from portfolio_tracker.services.constants import LIST_NAME_MAX_LENGTH
from portfolio_tracker.services.exceptions import (
    DefaultListDeletionError,
    DuplicateListNameError,
    ListNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ListService:

    def list_lists(self, db: Session, user_id: int) -> list[PortfolioList]:
        """The user's lists, default first, then oldest first."""
        query = (
            select(PortfolioList)
            .where(PortfolioList.user_id == user_id)
            .order_by(
                PortfolioList.is_default.desc(),
                PortfolioList.created_at.asc(),
                PortfolioList.id.asc(),
            )
        )
        return list(db.scalars(query).all())

    def get_list(self, db: Session, user_id: int, list_id: int) -> PortfolioList:
        portfolio_list = db.get(PortfolioList, list_id)
        if portfolio_list is None or portfolio_list.user_id != user_id:
            raise ListNotFoundError(list_id)
        return portfolio_list

    def get_default_list(self, db: Session, user_id: int) -> PortfolioList | None:
        query = select(PortfolioList).where(
            PortfolioList.user_id == user_id,
            PortfolioList.is_default.is_(True),
        )
        return db.scalars(query).first()

    def create_list(
            self,
            db: Session,
            user_id: int,
            name: str,
            description: str | None = None,
            is_default: bool = False,
    ) -> PortfolioList:
        """
        Create a list.

        Raises:
            ValidationError: Name empty or longer than 50 characters
            DuplicateListNameError: The user already has a list with that name
        """
        name = self._validate_name(name)
        self._ensure_name_free(db, user_id, name)

        first_list = self.get_default_list(db, user_id) is None
        make_default = is_default or first_list
        if make_default:
            self._clear_default(db, user_id)

        portfolio_list = PortfolioList(
            user_id=user_id,
            name=name,
            description=description,
            is_default=make_default,
        )
        db.add(portfolio_list)
        db.commit()
        db.refresh(portfolio_list)

        logger.info(
            f"Created list {portfolio_list.id} '{name}' for user {user_id}"
            + (" (default)" if make_default else "")
        )
        return portfolio_list

    def update_list(
            self,
            db: Session,
            user_id: int,
            list_id: int,
            name: str | None = None,
            description: str | None = None,
    ) -> PortfolioList:
        """Rename or re-describe a list."""
        portfolio_list = self.get_list(db, user_id, list_id)

        if name is not None:
            name = self._validate_name(name)
            if name != portfolio_list.name:
                self._ensure_name_free(db, user_id, name)
                portfolio_list.name = name
        if description is not None:
            portfolio_list.description = description

        db.commit()
        db.refresh(portfolio_list)
        return portfolio_list

    def set_default(self, db: Session, user_id: int, list_id: int) -> PortfolioList:
        """Make a list the user's default, clearing the flag on the others."""
        portfolio_list = self.get_list(db, user_id, list_id)
        self._clear_default(db, user_id)
        portfolio_list.is_default = True
        db.commit()
        db.refresh(portfolio_list)
        logger.info(f"List {list_id} is now the default for user {user_id}")
        return portfolio_list

    def delete_list(self, db: Session, user_id: int, list_id: int) -> None:
        """
        Delete a non-default list.

        Raises:
            ListNotFoundError: Unknown list or not the user's
            DefaultListDeletionError: The list is the user's default
        """
        portfolio_list = self.get_list(db, user_id, list_id)
        if portfolio_list.is_default:
            raise DefaultListDeletionError(list_id)

        default_list = self.get_default_list(db, user_id)
        target_id = default_list.id if default_list is not None else None

        try:
            moved = db.execute(
                update(Position)
                .where(Position.list_id == list_id)
                .values(list_id=target_id)
            ).rowcount
            db.execute(
                update(Transaction)
                .where(Transaction.list_id == list_id)
                .values(list_id=None)
            )
            db.execute(
                update(CashFlow)
                .where(CashFlow.list_id == list_id)
                .values(list_id=None)
            )
            db.expire(portfolio_list, ["positions"])
            db.delete(portfolio_list)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Deleted list {list_id} for user {user_id}; "
            f"moved {moved} positions to {target_id if target_id is not None else 'no list'}"
        )

    @staticmethod
    def _validate_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("List name is required", field="name")
        if len(name) > LIST_NAME_MAX_LENGTH:
            raise ValidationError(
                f"List name cannot be longer than {LIST_NAME_MAX_LENGTH} characters",
                field="name",
            )
        return name

    @staticmethod
    def _ensure_name_free(db: Session, user_id: int, name: str) -> None:
        query = select(PortfolioList.id).where(
            PortfolioList.user_id == user_id,
            PortfolioList.name == name,
        )
        if db.scalars(query).first() is not None:
            raise DuplicateListNameError(name)

    @staticmethod
    def _clear_default(db: Session, user_id: int) -> None:
        db.execute(
            update(PortfolioList)
            .where(PortfolioList.user_id == user_id, PortfolioList.is_default.is_(True))
            .values(is_default=False)
        )
