# backend/portfolio_tracker/models.py
import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint, Boolean, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TransactionType(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"


class CashFlowType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Deleting a user removes everything they own
    lists: Mapped[list["PortfolioList"]] = relationship(back_populates="owner", cascade="all, delete-orphan")
    positions: Mapped[list["Position"]] = relationship(back_populates="owner", cascade="all, delete-orphan")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="owner", cascade="all, delete-orphan")
    cash_flows: Mapped[list["CashFlow"]] = relationship(back_populates="owner", cascade="all, delete-orphan")


class PortfolioList(Base):
    """
    A named grouping of positions, transactions and cash flows.

    Serves as either a portfolio or a watchlist. At most one list per user
    has is_default set. Lists never own their members: deleting a list
    moves its positions elsewhere first.
    """
    __tablename__ = "lists"
    __table_args__ = (
        UniqueConstraint('user_id', 'name', name='uq_list_user_name'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="lists")
    positions: Mapped[list["Position"]] = relationship(back_populates="portfolio_list")


class Position(Base):
    """
    A symbol tracked by a user, optionally inside a list.

    quantity == 0 marks a watch-only entry: purchase_price and purchase_date
    carry no meaning for it and are never used for valuation.
    quantity > 0 requires purchase_price > 0 (the weighted-average cost).
    """
    __tablename__ = "positions"
    __table_args__ = (
        # Buys look positions up by (user, symbol, list)
        Index('ix_position_user_symbol_list', 'user_id', 'symbol', 'list_id'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    list_id: Mapped[int | None] = mapped_column(ForeignKey("lists.id", ondelete="SET NULL"), nullable=True, index=True)
    symbol: Mapped[str] = mapped_column(String(10), index=True)

    # Numeric(18, 8) keeps fractional shares and sub-cent average prices
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal(0))
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="positions")
    portfolio_list: Mapped["PortfolioList | None"] = relationship(back_populates="positions")
    # Transactions outlive the position: the FK is nulled, never cascaded
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="position")

    @property
    def is_watch_only(self) -> bool:
        return self.quantity == 0


class Transaction(Base):
    """
    Immutable buy/sell record.

    Never updated or deleted by the application; it is the audit trail that
    survives the position it was booked against.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        Index('ix_transaction_user_symbol_date', 'user_id', 'symbol', 'date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    position_id: Mapped[int | None] = mapped_column(ForeignKey("positions.id", ondelete="SET NULL"), nullable=True, index=True)
    list_id: Mapped[int | None] = mapped_column(ForeignKey("lists.id", ondelete="SET NULL"), nullable=True, index=True)
    symbol: Mapped[str] = mapped_column(String(10))
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType))
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    price: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    fees: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal(0))
    notes: Mapped[str | None] = mapped_column(String, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="transactions")
    position: Mapped["Position | None"] = relationship(back_populates="transactions")


class CashFlow(Base):
    """A deposit into or withdrawal from a user's (optionally list-scoped) cash."""
    __tablename__ = "cash_flows"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    list_id: Mapped[int | None] = mapped_column(ForeignKey("lists.id", ondelete="SET NULL"), nullable=True, index=True)
    flow_type: Mapped[CashFlowType] = mapped_column(Enum(CashFlowType))
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="cash_flows")
