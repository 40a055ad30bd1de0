"""
Override Store

Data access for DailyOverride rows, keyed by (scope_key, override_date).
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..models.daily_override import DailyOverride
from ..utils.db_helpers import acquire_row_lock, compare_and_decrement, store_guard
from .inventory_scope import InventoryScope


class OverrideStore:

    def __init__(self, db: Session):
        self.db = db

    def list_for_scope(
        self,
        scope: InventoryScope,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyOverride]:
        with store_guard(self.db, "override_store.list_for_scope"):
            query = self.db.query(DailyOverride).filter(DailyOverride.scope_key == scope.key)
            if start is not None:
                query = query.filter(DailyOverride.override_date >= start)
            if end is not None:
                query = query.filter(DailyOverride.override_date <= end)
            return query.order_by(DailyOverride.override_date).all()

    def get(self, scope: InventoryScope, day: date, lock: bool = False) -> Optional[DailyOverride]:
        """Exact-key lookup; lock=True takes a row lock where the dialect supports it"""
        condition = (DailyOverride.scope_key == scope.key) & (DailyOverride.override_date == day)
        with store_guard(self.db, "override_store.get"):
            if lock:
                return acquire_row_lock(self.db, DailyOverride, condition)
            return self.db.query(DailyOverride).filter(condition).first()

    def add(self, override: DailyOverride) -> DailyOverride:
        with store_guard(self.db, "override_store.add"):
            self.db.add(override)
            self.db.flush()
            return override

    def flush(self) -> None:
        with store_guard(self.db, "override_store.flush"):
            self.db.flush()

    def delete_by_key(self, scope: InventoryScope, day: date) -> int:
        with store_guard(self.db, "override_store.delete_by_key"):
            result = self.db.execute(
                delete(DailyOverride)
                .where(
                    DailyOverride.scope_key == scope.key,
                    DailyOverride.override_date == day,
                )
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount

    def decrement_available(self, override_id: str, units: int, trigger_type: str) -> bool:
        """Compare-and-decrement available_count; False when fewer than units remain"""
        with store_guard(self.db, "override_store.decrement_available"):
            return compare_and_decrement(
                self.db,
                DailyOverride,
                DailyOverride.id == override_id,
                "available_count",
                units,
                extra_values={"trigger_type": trigger_type},
            )

    def refresh(self, override: DailyOverride) -> DailyOverride:
        with store_guard(self.db, "override_store.refresh"):
            self.db.refresh(override)
            return override
