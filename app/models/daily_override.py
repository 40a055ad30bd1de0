"""
Daily Override Model

Per-date exception to the covering range: price and/or capacity.
"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, Integer, Index, UniqueConstraint
from ..database import Base


class TriggerType(str, enum.Enum):
    SELLER_UPDATE = "seller_update"
    BOOKING_CONSUMPTION = "booking_consumption"
    SYSTEM = "system"


class DailyOverride(Base):
    """
    One row per (scope_key, override_date).

    price NULL means "inherit the range price". Capacity fields are the
    only source of booked-state inference in the resolver.

    date_range_id records the range that covered the date when the row was
    written. It is deliberately not a foreign key: replacing a range leaves
    its overrides in place, and the resolver drops those whose range is gone
    and whose date is no longer covered.
    """
    __tablename__ = "inventory_daily_overrides"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    listing_id = Column(String(36), nullable=False)
    variant_id = Column(String(36), nullable=True)
    slot_definition_id = Column(String(36), nullable=True)
    scope_key = Column(String(120), nullable=False)

    date_range_id = Column(String(36), nullable=True)

    override_date = Column(Date, nullable=False)

    price = Column(Integer, nullable=True)
    total_capacity = Column(Integer, nullable=True)
    available_count = Column(Integer, nullable=True)

    trigger_type = Column(String(30), nullable=False, default=TriggerType.SELLER_UPDATE.value)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('scope_key', 'override_date', name='uq_override_scope_date'),
        Index('ix_override_range', 'date_range_id'),
    )

    @property
    def has_capacity(self) -> bool:
        return self.total_capacity is not None and self.available_count is not None

    def __repr__(self):
        return f"<DailyOverride {self.scope_key} {self.override_date} price={self.price}>"
