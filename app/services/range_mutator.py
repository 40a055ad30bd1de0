"""
Range Mutator

Create/replace inventory date ranges with overlap-safe semantics.

upsert_range deletes every active range of the same scope that intersects
the new span and inserts the new one, inside a single transaction. There
is no merge: the new range fully replaces what it overlaps. Overrides
anchored to a deleted range are kept in storage; the resolver only shows
them while their date is still covered by some active range.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models.inventory_date_range import InventoryDateRange
from ..utils.db_helpers import atomic
from ..utils.errors import ConflictError, NotFoundError, ValidationError
from ..utils.logging_config import get_logger
from ..utils.validators import (
    DayLike, parse_day, parse_optional_day, validate_date_range,
    require_amount, optional_amount,
)
from .inventory_scope import InventoryScope
from .range_store import RangeStore

logger = get_logger(__name__)


class RangeMutator:

    def __init__(self, db: Session):
        self.db = db
        self.store = RangeStore(db)

    def upsert_range(
        self,
        listing_id: str,
        variant_id: Optional[str],
        from_date: DayLike,
        to_date: DayLike,
        base_price_per_day: int,
        total_capacity: int = 1,
        slot_definition_id: Optional[str] = None,
    ) -> InventoryDateRange:
        """
        Replace every overlapping active range of the scope with one new range.

        Overlap test: existing.from <= to_date AND existing.to >= from_date.
        Delete and insert commit together or not at all, so a failure never
        leaves the span uncovered.
        """
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        start = parse_day(from_date, "from_date")
        end = parse_day(to_date, "to_date")
        validate_date_range(start, end, settings.calendar_max_span_days)
        price = require_amount(base_price_per_day, "base_price_per_day")
        capacity = require_amount(total_capacity, "total_capacity", minimum=1)

        with atomic(self.db, "upsert_range"):
            overlapping = self.store.find_overlapping(scope, start, end)
            deleted_ids = [r.id for r in overlapping]
            self.store.delete_by_ids(deleted_ids)
            new_range = self.store.insert(scope, start, end, price, capacity)

        logger.range_replaced(new_range.id, scope.key, deleted_ids)
        return new_range

    def update_range(
        self,
        range_id: str,
        base_price_per_day: Optional[int] = None,
        total_capacity: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> InventoryDateRange:
        """Patch price/capacity/active flag of an existing range; dates are changed via upsert_range"""
        price = optional_amount(base_price_per_day, "base_price_per_day")
        capacity = optional_amount(total_capacity, "total_capacity", minimum=1)
        if is_active is not None and not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")

        with atomic(self.db, "update_range"):
            date_range = self._require(range_id)
            if is_active and not date_range.is_active:
                # Re-activating must not create an overlap
                scope = InventoryScope.of(date_range.listing_id, date_range.variant_id, date_range.slot_definition_id)
                clashes = [
                    r for r in self.store.find_overlapping(
                        scope, date_range.available_from_date, date_range.available_to_date
                    )
                    if r.id != date_range.id
                ]
                if clashes:
                    raise ConflictError(
                        "Range overlaps an active range and cannot be re-activated",
                        overlapping_ids=[r.id for r in clashes],
                    )
            if price is not None:
                date_range.base_price_per_day = price
            if capacity is not None:
                date_range.total_capacity = capacity
            if is_active is not None:
                date_range.is_active = is_active

        logger.log_with_context(logging.INFO, "Range updated", entity_type="date_range", entity_id=range_id)
        return date_range

    def delete_range(self, range_id: str) -> None:
        with atomic(self.db, "delete_range"):
            self.store.delete(self._require(range_id))
        logger.log_with_context(logging.INFO, "Range deleted", entity_type="date_range", entity_id=range_id)

    def get_range_for_date(
        self,
        listing_id: str,
        variant_id: Optional[str],
        day: DayLike,
        slot_definition_id: Optional[str] = None,
    ) -> InventoryDateRange:
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        target = parse_day(day, "date")
        date_range = self.store.find_covering(scope, target)
        if date_range is None:
            raise NotFoundError("No active date range covers this date", date=target.isoformat())
        return date_range

    def list_ranges(
        self,
        listing_id: str,
        variant_id: Optional[str] = None,
        slot_definition_id: Optional[str] = None,
        start: Optional[DayLike] = None,
        end: Optional[DayLike] = None,
    ) -> List[InventoryDateRange]:
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        return self.store.list_active(
            scope,
            parse_optional_day(start, "start"),
            parse_optional_day(end, "end"),
        )

    def _require(self, range_id: str) -> InventoryDateRange:
        date_range = self.store.get(range_id)
        if date_range is None:
            raise NotFoundError("Date range not found", range_id=range_id)
        return date_range


def get_range_mutator(db: Session) -> RangeMutator:
    return RangeMutator(db)
