"""Forbid overlapping active ranges per scope (PostgreSQL only)

Revision ID: 002_range_overlap_exclusion
Revises: 001_inventory_schema
Create Date: 2026-10-17

Adds an EXCLUDE USING GIST constraint so two active ranges of the same
scope_key can never cover a common date. daterange(..., '[]') matches the
inclusive bounds the range mutator uses. A violating insert raises
IntegrityError, which the stores report as ConflictError.

SQLite has no exclusion constraints; there the range mutator is the only
guard.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '002_range_overlap_exclusion'
down_revision: Union[str, None] = '001_inventory_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != 'postgresql':
        return

    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute("""
        ALTER TABLE inventory_date_ranges
        ADD CONSTRAINT ex_range_scope_no_overlap
        EXCLUDE USING gist (
            scope_key WITH =,
            daterange(available_from_date, available_to_date, '[]') WITH &&
        )
        WHERE (is_active)
    """)


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != 'postgresql':
        return

    op.execute("ALTER TABLE inventory_date_ranges DROP CONSTRAINT IF EXISTS ex_range_scope_no_overlap")
    # btree_gist stays installed; other indexes may use it
