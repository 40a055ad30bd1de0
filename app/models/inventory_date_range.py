"""
Inventory Date Range Model

Coarse-grained availability: "this listing/variant (optionally a slot) is
bookable from date A to date B at price P with capacity C".
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Boolean, Integer, Index, CheckConstraint
from ..database import Base


class InventoryDateRange(Base):
    """
    A contiguous, inclusive span of bookable dates for one inventory scope.

    Active ranges of the same scope_key must not overlap. The range mutator
    guarantees it on write and, on PostgreSQL, an exclusion constraint
    (alembic 002) guarantees it in the store.
    """
    __tablename__ = "inventory_date_ranges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Scope
    listing_id = Column(String(36), nullable=False)
    variant_id = Column(String(36), nullable=True)
    slot_definition_id = Column(String(36), nullable=True)
    scope_key = Column(String(120), nullable=False)  # see InventoryScope.key

    # Span (inclusive on both ends)
    available_from_date = Column(Date, nullable=False)
    available_to_date = Column(Date, nullable=False)

    # Smallest currency unit
    base_price_per_day = Column(Integer, nullable=False)
    total_capacity = Column(Integer, nullable=False, default=1)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('available_from_date <= available_to_date', name='ck_range_chronological'),
        CheckConstraint('total_capacity >= 1', name='ck_range_capacity_positive'),
        CheckConstraint('base_price_per_day >= 0', name='ck_range_price_non_negative'),
        Index('ix_range_scope_active_from', 'scope_key', 'is_active', 'available_from_date'),
        Index('ix_range_listing', 'listing_id'),
    )

    def __repr__(self):
        return (
            f"<InventoryDateRange {self.scope_key} "
            f"{self.available_from_date}..{self.available_to_date} @ {self.base_price_per_day}>"
        )
