"""
Range Store

Data access for InventoryDateRange rows. No merge logic lives here.
Writes are only flushed; the caller owns the transaction.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..models.inventory_date_range import InventoryDateRange
from ..utils.db_helpers import store_guard
from .inventory_scope import InventoryScope


class RangeStore:

    def __init__(self, db: Session):
        self.db = db

    def list_active(
        self,
        scope: InventoryScope,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[InventoryDateRange]:
        """Active ranges of a scope in store order, optionally only those touching [start, end]"""
        with store_guard(self.db, "range_store.list_active"):
            query = self.db.query(InventoryDateRange).filter(
                InventoryDateRange.scope_key == scope.key,
                InventoryDateRange.is_active.is_(True),
            )
            if end is not None:
                query = query.filter(InventoryDateRange.available_from_date <= end)
            if start is not None:
                query = query.filter(InventoryDateRange.available_to_date >= start)
            return query.order_by(
                InventoryDateRange.available_from_date,
                InventoryDateRange.created_at,
                InventoryDateRange.id,
            ).all()

    def find_covering(self, scope: InventoryScope, day: date) -> Optional[InventoryDateRange]:
        with store_guard(self.db, "range_store.find_covering"):
            return self.db.query(InventoryDateRange).filter(
                InventoryDateRange.scope_key == scope.key,
                InventoryDateRange.is_active.is_(True),
                InventoryDateRange.available_from_date <= day,
                InventoryDateRange.available_to_date >= day,
            ).order_by(
                InventoryDateRange.available_from_date.desc(),
                InventoryDateRange.created_at.desc(),
            ).first()

    def get(self, range_id: str) -> Optional[InventoryDateRange]:
        with store_guard(self.db, "range_store.get"):
            return self.db.query(InventoryDateRange).filter(
                InventoryDateRange.id == range_id
            ).first()

    def find_overlapping(self, scope: InventoryScope, from_date: date, to_date: date) -> List[InventoryDateRange]:
        """Active ranges with existing.from <= to_date AND existing.to >= from_date"""
        with store_guard(self.db, "range_store.find_overlapping"):
            return self.db.query(InventoryDateRange).filter(
                InventoryDateRange.scope_key == scope.key,
                InventoryDateRange.is_active.is_(True),
                InventoryDateRange.available_from_date <= to_date,
                InventoryDateRange.available_to_date >= from_date,
            ).all()

    def delete_by_ids(self, range_ids: List[str]) -> int:
        if not range_ids:
            return 0
        with store_guard(self.db, "range_store.delete_by_ids"):
            result = self.db.execute(
                delete(InventoryDateRange)
                .where(InventoryDateRange.id.in_(range_ids))
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount

    def insert(
        self,
        scope: InventoryScope,
        from_date: date,
        to_date: date,
        base_price_per_day: int,
        total_capacity: int,
    ) -> InventoryDateRange:
        with store_guard(self.db, "range_store.insert"):
            date_range = InventoryDateRange(
                **scope.row_fields(),
                available_from_date=from_date,
                available_to_date=to_date,
                base_price_per_day=base_price_per_day,
                total_capacity=total_capacity,
                is_active=True,
            )
            self.db.add(date_range)
            self.db.flush()
            return date_range

    def delete(self, date_range: InventoryDateRange) -> None:
        with store_guard(self.db, "range_store.delete"):
            self.db.delete(date_range)
            self.db.flush()
