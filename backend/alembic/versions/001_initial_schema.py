"""Initial schema

Creates the portfolio tracker tables.

Tables:
    - users: Owners of all other data
    - lists: Named portfolios / watchlists, at most one default per user
    - positions: Tracked symbols (quantity 0 = watch only)
    - transactions: Immutable buy/sell log
    - cash_flows: Deposits and withdrawals

Revision ID: 001
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # USERS
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('email', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # LISTS
    # ==========================================================================
    op.create_table(
        'lists',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'name', name='uq_list_user_name'),
    )

    # ==========================================================================
    # POSITIONS
    # ==========================================================================
    op.create_table(
        'positions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('list_id', sa.Integer(), sa.ForeignKey('lists.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('symbol', sa.String(10), nullable=False, index=True),
        sa.Column('quantity', sa.Numeric(18, 8), nullable=False, server_default='0'),
        sa.Column('purchase_price', sa.Numeric(18, 8), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_position_user_symbol_list', 'positions', ['user_id', 'symbol', 'list_id'])

    # ==========================================================================
    # TRANSACTIONS
    # ==========================================================================
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position_id', sa.Integer(), sa.ForeignKey('positions.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('list_id', sa.Integer(), sa.ForeignKey('lists.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('symbol', sa.String(10), nullable=False),
        sa.Column('transaction_type', sa.Enum('BUY', 'SELL', name='transactiontype'), nullable=False),
        sa.Column('quantity', sa.Numeric(18, 8), nullable=False),
        sa.Column('price', sa.Numeric(18, 8), nullable=False),
        sa.Column('fees', sa.Numeric(18, 8), nullable=False, server_default='0'),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_transaction_user_symbol_date', 'transactions', ['user_id', 'symbol', 'date'])

    # ==========================================================================
    # CASH FLOWS
    # ==========================================================================
    op.create_table(
        'cash_flows',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('list_id', sa.Integer(), sa.ForeignKey('lists.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('flow_type', sa.Enum('DEPOSIT', 'WITHDRAWAL', name='cashflowtype'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('cash_flows')
    op.drop_index('ix_transaction_user_symbol_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_position_user_symbol_list', table_name='positions')
    op.drop_table('positions')
    op.drop_table('lists')
    op.drop_table('users')

    sa.Enum(name='cashflowtype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='transactiontype').drop(op.get_bind(), checkfirst=True)
