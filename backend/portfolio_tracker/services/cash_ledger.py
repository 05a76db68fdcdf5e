# backend/portfolio_tracker/services/cash_ledger.py
"""
Cash ledger service.

Records deposits and withdrawals and reduces them to a single number:
net cash invested = sum(deposits) - sum(withdrawals). That figure is the
denominator of the portfolio's headline return.

Only `amount > 0` is validated. Withdrawing more than was deposited is
allowed and yields a negative net figure; the ledger is the user's own
bookkeeping.

Usage:
    from portfolio_tracker.services.cash_ledger import CashLedgerService

    ledger = CashLedgerService()
    ledger.add_cash_flow(db, user_id=1, flow_type=CashFlowType.DEPOSIT, amount=Decimal("10000"))
    ledger.net_cash_invested(db, user_id=1)  # Decimal("10000")
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from portfolio_tracker.models import CashFlow, CashFlowType, PortfolioList
from portfolio_tracker.services.exceptions import (
    CashFlowNotFoundError,
    ListNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def net_cash_from_flows(flows: Iterable[CashFlow]) -> Decimal:
    """Deposits minus withdrawals over the given flows."""
    total = Decimal("0")
    for flow in flows:
        if flow.flow_type == CashFlowType.DEPOSIT:
            total += flow.amount
        else:
            total -= flow.amount
    return total


class CashLedgerService:
    """Deposit/withdrawal bookkeeping, scoped by user and optionally by list."""

    def add_cash_flow(
            self,
            db: Session,
            user_id: int,
            flow_type: CashFlowType,
            amount: Decimal,
            date: datetime | None = None,
            description: str | None = None,
            list_id: int | None = None,
    ) -> CashFlow:
        """
        Record a deposit or withdrawal.

        Raises:
            ValidationError: amount is not positive
            ListNotFoundError: list_id is not one of the user's lists
        """
        self._validate_amount(amount)
        if list_id is not None:
            self._ensure_list_owned(db, user_id, list_id)

        cash_flow = CashFlow(
            user_id=user_id,
            list_id=list_id,
            flow_type=flow_type,
            amount=amount,
            date=date or datetime.now(timezone.utc),
            description=description,
        )
        db.add(cash_flow)
        db.commit()
        db.refresh(cash_flow)

        logger.info(
            f"Recorded {flow_type.value} of {amount} for user {user_id}"
            + (f" in list {list_id}" if list_id is not None else "")
        )
        return cash_flow

    def list_cash_flows(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
    ) -> list[CashFlow]:
        """The user's cash flows, newest first, optionally for one list."""
        query = select(CashFlow).where(CashFlow.user_id == user_id)
        if list_id is not None:
            query = query.where(CashFlow.list_id == list_id)
        query = query.order_by(CashFlow.date.desc(), CashFlow.id.desc())
        return list(db.scalars(query).all())

    def get_cash_flow(self, db: Session, user_id: int, cash_flow_id: int) -> CashFlow:
        cash_flow = db.get(CashFlow, cash_flow_id)
        if cash_flow is None or cash_flow.user_id != user_id:
            raise CashFlowNotFoundError(cash_flow_id)
        return cash_flow

    def update_cash_flow(
            self,
            db: Session,
            user_id: int,
            cash_flow_id: int,
            flow_type: CashFlowType | None = None,
            amount: Decimal | None = None,
            date: datetime | None = None,
            description: str | None = None,
            list_id: int | None = None,
    ) -> CashFlow:
        """Partially update a cash flow owned by the user."""
        cash_flow = self.get_cash_flow(db, user_id, cash_flow_id)

        if amount is not None:
            self._validate_amount(amount)
            cash_flow.amount = amount
        if flow_type is not None:
            cash_flow.flow_type = flow_type
        if date is not None:
            cash_flow.date = date
        if description is not None:
            cash_flow.description = description
        if list_id is not None:
            self._ensure_list_owned(db, user_id, list_id)
            cash_flow.list_id = list_id

        db.commit()
        db.refresh(cash_flow)
        return cash_flow

    def delete_cash_flow(self, db: Session, user_id: int, cash_flow_id: int) -> None:
        cash_flow = self.get_cash_flow(db, user_id, cash_flow_id)
        db.delete(cash_flow)
        db.commit()
        logger.info(f"Deleted cash flow {cash_flow_id} for user {user_id}")

    def net_cash_invested(
            self,
            db: Session,
            user_id: int,
            list_id: int | None = None,
    ) -> Decimal:
        """
        Net cash put to work by the user.

        Without list_id every cash flow of the user counts, whatever list
        it belongs to.
        """
        return net_cash_from_flows(self.list_cash_flows(db, user_id, list_id))

    @staticmethod
    def _validate_amount(amount: Decimal) -> None:
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0", field="amount")

    @staticmethod
    def _ensure_list_owned(db: Session, user_id: int, list_id: int) -> None:
        portfolio_list = db.get(PortfolioList, list_id)
        if portfolio_list is None or portfolio_list.user_id != user_id:
            raise ListNotFoundError(list_id)
