"""
Block Store

Data access for BlockedDate rows. Blocks are keyed by listing/variant only.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..models.blocked_date import BlockedDate
from ..utils.db_helpers import store_guard
from .inventory_scope import InventoryScope


class BlockStore:

    def __init__(self, db: Session):
        self.db = db

    def list_for_scope(
        self,
        scope: InventoryScope,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[BlockedDate]:
        scope = scope.block_scope
        with store_guard(self.db, "block_store.list_for_scope"):
            query = self.db.query(BlockedDate).filter(BlockedDate.scope_key == scope.key)
            if start is not None:
                query = query.filter(BlockedDate.blocked_date >= start)
            if end is not None:
                query = query.filter(BlockedDate.blocked_date <= end)
            return query.order_by(BlockedDate.blocked_date).all()

    def get(self, scope: InventoryScope, day: date) -> Optional[BlockedDate]:
        scope = scope.block_scope
        with store_guard(self.db, "block_store.get"):
            return self.db.query(BlockedDate).filter(
                BlockedDate.scope_key == scope.key,
                BlockedDate.blocked_date == day,
            ).first()

    def insert(self, scope: InventoryScope, day: date, reason: Optional[str], created_by: str) -> BlockedDate:
        scope = scope.block_scope
        with store_guard(self.db, "block_store.insert"):
            block = BlockedDate(
                listing_id=scope.listing_id,
                variant_id=scope.variant_id,
                scope_key=scope.key,
                blocked_date=day,
                reason=reason,
                created_by_operator_id=created_by,
            )
            self.db.add(block)
            self.db.flush()
            return block

    def delete_by_key(self, scope: InventoryScope, day: date) -> int:
        scope = scope.block_scope
        with store_guard(self.db, "block_store.delete_by_key"):
            result = self.db.execute(
                delete(BlockedDate)
                .where(
                    BlockedDate.scope_key == scope.key,
                    BlockedDate.blocked_date == day,
                )
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount
