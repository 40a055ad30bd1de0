"""Inventory schema - ranges, daily overrides, blocked dates

Revision ID: 001_inventory_schema
Revises:
Create Date: 2026-10-17

Creates:
- inventory_date_ranges: bookable spans per scope (listing/variant/slot)
- inventory_daily_overrides: per-date price/capacity exceptions
- inventory_blocked_dates: per-date exclusions with operator audit

Every table carries scope_key; all queries filter on it.
inventory_daily_overrides.date_range_id has no foreign key so overrides
survive range replacement.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_inventory_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==================
    # inventory_date_ranges
    # ==================
    op.create_table(
        'inventory_date_ranges',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('listing_id', sa.String(36), nullable=False),
        sa.Column('variant_id', sa.String(36), nullable=True),
        sa.Column('slot_definition_id', sa.String(36), nullable=True),
        sa.Column('scope_key', sa.String(120), nullable=False),
        sa.Column('available_from_date', sa.Date(), nullable=False),
        sa.Column('available_to_date', sa.Date(), nullable=False),
        sa.Column('base_price_per_day', sa.Integer(), nullable=False),
        sa.Column('total_capacity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('available_from_date <= available_to_date', name='ck_range_chronological'),
        sa.CheckConstraint('total_capacity >= 1', name='ck_range_capacity_positive'),
        sa.CheckConstraint('base_price_per_day >= 0', name='ck_range_price_non_negative'),
    )
    op.create_index(
        'ix_range_scope_active_from', 'inventory_date_ranges',
        ['scope_key', 'is_active', 'available_from_date'],
    )
    op.create_index('ix_range_listing', 'inventory_date_ranges', ['listing_id'])

    # ==================
    # inventory_daily_overrides
    # ==================
    op.create_table(
        'inventory_daily_overrides',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('listing_id', sa.String(36), nullable=False),
        sa.Column('variant_id', sa.String(36), nullable=True),
        sa.Column('slot_definition_id', sa.String(36), nullable=True),
        sa.Column('scope_key', sa.String(120), nullable=False),
        sa.Column('date_range_id', sa.String(36), nullable=True),
        sa.Column('override_date', sa.Date(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('total_capacity', sa.Integer(), nullable=True),
        sa.Column('available_count', sa.Integer(), nullable=True),
        sa.Column('trigger_type', sa.String(30), nullable=False, server_default='seller_update'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('scope_key', 'override_date', name='uq_override_scope_date'),
    )
    op.create_index('ix_override_range', 'inventory_daily_overrides', ['date_range_id'])

    # ==================
    # inventory_blocked_dates
    # ==================
    op.create_table(
        'inventory_blocked_dates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('listing_id', sa.String(36), nullable=False),
        sa.Column('variant_id', sa.String(36), nullable=True),
        sa.Column('scope_key', sa.String(120), nullable=False),
        sa.Column('blocked_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('created_by_operator_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('scope_key', 'blocked_date', name='uq_blocked_scope_date'),
    )
    op.create_index('ix_blocked_listing', 'inventory_blocked_dates', ['listing_id'])


def downgrade() -> None:
    op.drop_index('ix_blocked_listing', table_name='inventory_blocked_dates')
    op.drop_table('inventory_blocked_dates')
    op.drop_index('ix_override_range', table_name='inventory_daily_overrides')
    op.drop_table('inventory_daily_overrides')
    op.drop_index('ix_range_listing', table_name='inventory_date_ranges')
    op.drop_index('ix_range_scope_active_from', table_name='inventory_date_ranges')
    op.drop_table('inventory_date_ranges')
