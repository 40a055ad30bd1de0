"""
Inventory Service

Seller-facing and booking-facing writes on per-date data:
- Block / unblock dates (audit: who blocked, why)
- Upsert / remove per-day price and capacity overrides
- Consume capacity for a booking (compare-and-decrement)
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.blocked_date import BlockedDate
from ..models.daily_override import DailyOverride, TriggerType
from ..utils.db_helpers import atomic
from ..utils.errors import ConflictError, NotFoundError, ValidationError
from ..utils.logging_config import get_logger
from ..utils.validators import (
    DayLike, parse_day, parse_optional_day, require_amount, optional_amount, require_text,
)
from .block_store import BlockStore
from .inventory_scope import InventoryScope
from .override_store import OverrideStore
from .range_store import RangeStore

logger = get_logger(__name__)


class InventoryService:
    """
    Service for per-date inventory state.

    Every write runs in its own transaction via atomic(); validation errors
    are raised before the store is touched.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ranges = RangeStore(db)
        self.overrides = OverrideStore(db)
        self.blocks = BlockStore(db)

    # ==================
    # Blocks
    # ==================

    def block(
        self,
        listing_id: str,
        variant_id: Optional[str],
        blocked_date: DayLike,
        created_by: Optional[str],
        reason: Optional[str] = None,
        slot_definition_id: Optional[str] = None,
    ) -> BlockedDate:
        """
        Mark a date unbookable for a listing/variant.

        Blocking an already blocked date returns the existing row. A slot id
        only feeds the default reason; the block covers every slot.
        """
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        day = parse_day(blocked_date, "date")
        operator_id = require_text(created_by, "created_by")
        if not reason and scope.slot_definition_id:
            reason = f"Blocked for slot {scope.slot_definition_id}"

        try:
            with atomic(self.db, "block"):
                existing = self.blocks.get(scope, day)
                if existing is not None:
                    return existing
                block = self.blocks.insert(scope, day, reason or None, operator_id)
        except ConflictError:
            # Lost a race with a concurrent block of the same date
            existing = self.blocks.get(scope, day)
            if existing is None:
                raise
            return existing

        logger.date_blocked(block.id, scope.block_scope.key, day.isoformat(), operator_id)
        return block

    def unblock(
        self,
        listing_id: str,
        variant_id: Optional[str],
        blocked_date: DayLike,
    ) -> int:
        """Delete matching block rows. Unblocking a free date is a no-op; returns rows removed."""
        scope = InventoryScope.of(listing_id, variant_id)
        day = parse_day(blocked_date, "date")

        with atomic(self.db, "unblock"):
            removed = self.blocks.delete_by_key(scope, day)

        logger.date_unblocked(scope.key, day.isoformat(), removed)
        return removed

    def list_blocks(
        self,
        listing_id: str,
        variant_id: Optional[str] = None,
        start: Optional[DayLike] = None,
        end: Optional[DayLike] = None,
    ) -> List[BlockedDate]:
        scope = InventoryScope.of(listing_id, variant_id)
        return self.blocks.list_for_scope(
            scope,
            parse_optional_day(start, "start"),
            parse_optional_day(end, "end"),
        )

    # ==================
    # Overrides
    # ==================

    def upsert_override(
        self,
        listing_id: str,
        variant_id: Optional[str],
        override_date: DayLike,
        price: Optional[int] = None,
        available_count: Optional[int] = None,
        total_capacity: Optional[int] = None,
        slot_definition_id: Optional[str] = None,
    ) -> DailyOverride:
        """
        Create or patch the override for one date.

        Only supplied fields change on an existing row. A new row gets 0 for
        unsupplied capacity fields, except that available_count starts at
        total_capacity when only the total is given, and total_capacity is
        taken from the covering range (or the count itself) when only
        available_count is given. Always stamped seller_update.
        """
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        day = parse_day(override_date, "date")
        price = optional_amount(price, "price")
        available_count = optional_amount(available_count, "available_count")
        total_capacity = optional_amount(total_capacity, "total_capacity")

        try:
            override, action = self._write_override(scope, day, price, available_count, total_capacity)
        except ConflictError:
            # Lost a race with a concurrent create of the same date; patch the winner's row
            override, action = self._write_override(scope, day, price, available_count, total_capacity)

        logger.override_changed(
            override.id, scope.key, day.isoformat(), action,
            price=override.price,
            total_capacity=override.total_capacity,
            available_count=override.available_count,
        )
        return override

    def _write_override(
        self,
        scope: InventoryScope,
        day: date,
        price: Optional[int],
        available_count: Optional[int],
        total_capacity: Optional[int],
    ) -> Tuple[DailyOverride, str]:
        with atomic(self.db, "upsert_override"):
            covering = self.ranges.find_covering(scope, day)
            override = self.overrides.get(scope, day, lock=True)
            action = "updated"

            if override is None:
                action = "created"
                if total_capacity is None and available_count is not None:
                    total_capacity = covering.total_capacity if covering is not None else available_count
                if available_count is None:
                    available_count = total_capacity if total_capacity is not None else 0
                override = DailyOverride(
                    **scope.row_fields(),
                    override_date=day,
                    price=price,
                    total_capacity=total_capacity if total_capacity is not None else 0,
                    available_count=available_count,
                )
            else:
                if price is not None:
                    override.price = price
                if total_capacity is not None:
                    override.total_capacity = total_capacity
                if available_count is not None:
                    override.available_count = available_count

            _check_capacity(override)
            override.trigger_type = TriggerType.SELLER_UPDATE.value
            if covering is not None:
                override.date_range_id = covering.id

            if action == "created":
                self.overrides.add(override)
            else:
                self.overrides.flush()

        return override, action

    def remove_override(
        self,
        listing_id: str,
        variant_id: Optional[str],
        override_date: DayLike,
        slot_definition_id: Optional[str] = None,
    ) -> int:
        """Delete the override for one date; idempotent, returns rows removed."""
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        day = parse_day(override_date, "date")

        with atomic(self.db, "remove_override"):
            removed = self.overrides.delete_by_key(scope, day)

        logger.override_changed(None, scope.key, day.isoformat(), "removed", removed=removed)
        return removed

    # ==================
    # Booking consumption
    # ==================

    def consume_capacity(
        self,
        listing_id: str,
        variant_id: Optional[str],
        booking_date: DayLike,
        units: int = 1,
        slot_definition_id: Optional[str] = None,
    ) -> DailyOverride:
        """
        Take `units` from a date's available_count for a booking.

        The decrement is a conditional UPDATE (available_count >= units), run
        under a row lock on PostgreSQL, so concurrent bookings can never sell
        more than total_capacity. When the date has no override yet, or only
        a price-only seller override, capacity is taken from the covering
        range.
        """
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        day = parse_day(booking_date, "date")
        units = require_amount(units, "units", minimum=1)

        with atomic(self.db, "consume_capacity"):
            if self.blocks.get(scope, day) is not None:
                raise ConflictError("Date is blocked", date=day.isoformat())

            override = self.overrides.get(scope, day, lock=True)
            if override is None or _needs_range_capacity(override):
                covering = self.ranges.find_covering(scope, day)
                if covering is None:
                    raise NotFoundError("No active date range covers this date", date=day.isoformat())
                if override is None:
                    override = self.overrides.add(DailyOverride(
                        **scope.row_fields(),
                        date_range_id=covering.id,
                        override_date=day,
                        price=None,
                        total_capacity=covering.total_capacity,
                        available_count=covering.total_capacity,
                        trigger_type=TriggerType.BOOKING_CONSUMPTION.value,
                    ))
                else:
                    if not override.total_capacity:
                        override.total_capacity = covering.total_capacity
                        override.available_count = covering.total_capacity
                    elif override.available_count is None:
                        override.available_count = override.total_capacity
                    self.overrides.flush()

            if not self.overrides.decrement_available(
                override.id, units, TriggerType.BOOKING_CONSUMPTION.value
            ):
                raise ConflictError(
                    "Not enough capacity available",
                    date=day.isoformat(),
                    requested=units,
                    remaining=override.available_count,
                )
            self.overrides.refresh(override)

        logger.log_with_context(
            logging.INFO,
            f"Capacity consumed: {day.isoformat()} x{units}",
            entity_type="daily_override",
            entity_id=override.id,
            scope_key=scope.key,
            available_count=override.available_count,
        )
        return override


def _needs_range_capacity(override: DailyOverride) -> bool:
    """No capacity of its own: missing fields, or a price-only seller row (0/0)"""
    if not override.has_capacity:
        return True
    return override.total_capacity == 0 and override.trigger_type == TriggerType.SELLER_UPDATE.value


def _check_capacity(override: DailyOverride) -> None:
    if (
        override.total_capacity is not None
        and override.available_count is not None
        and override.available_count > override.total_capacity
    ):
        raise ValidationError(
            "available_count cannot exceed total_capacity",
            available_count=override.available_count,
            total_capacity=override.total_capacity,
        )


def get_inventory_service(db: Session) -> InventoryService:
    """Factory function to get an inventory service instance"""
    return InventoryService(db)
