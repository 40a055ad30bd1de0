"""
Blocked Date Model

Explicit exclusion of a date for a listing/variant. Presence of a row makes
the date unbookable whatever the range or override data says.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Index, UniqueConstraint
from ..database import Base


class BlockedDate(Base):
    __tablename__ = "inventory_blocked_dates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    listing_id = Column(String(36), nullable=False)
    variant_id = Column(String(36), nullable=True)
    scope_key = Column(String(120), nullable=False)  # slot component always empty

    blocked_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)

    # Acting operator, required
    created_by_operator_id = Column(String(36), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('scope_key', 'blocked_date', name='uq_blocked_scope_date'),
        Index('ix_blocked_listing', 'listing_id'),
    )

    def __repr__(self):
        return f"<BlockedDate {self.scope_key} {self.blocked_date}>"
