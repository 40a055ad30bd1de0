"""
Availability Resolver

Merges ranges, per-day overrides and blocks into one per-date calendar.

Precedence, lowest to highest, one pass each:
1. seed_ranges        - every date of every active range: range price, available, source=range
2. apply_overrides    - override price (if set) and capacity fields, source=override
3. infer_booked_state - total_capacity > available_count  =>  unavailable, source=booked
4. apply_blocks       - blocked dates are unavailable, source=blocked, nothing overrides this

Each pass mutates a {date: CalendarEntry} dict in place, so every step can
be tested on its own. Nothing here is cached; a calendar is built fresh on
every call.
"""

import calendar as _calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..models.blocked_date import BlockedDate
from ..models.daily_override import DailyOverride
from ..models.inventory_date_range import InventoryDateRange
from ..utils.errors import ValidationError
from ..utils.logging_config import get_logger
from .block_store import BlockStore
from .inventory_scope import InventoryScope
from .override_store import OverrideStore
from .range_store import RangeStore

logger = get_logger(__name__)

SOURCE_RANGE = "range"
SOURCE_OVERRIDE = "override"
SOURCE_BOOKED = "booked"
SOURCE_BLOCKED = "blocked"


@dataclass
class CalendarEntry:
    """Resolved state of one date"""
    date: date
    price: int
    available: bool
    source: str
    total_capacity: Optional[int] = None
    available_count: Optional[int] = None
    remaining_count: Optional[int] = None
    date_range_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "date": self.date.isoformat(),
            "price": self.price,
            "available": self.available,
            "source": self.source,
        }
        if self.total_capacity is not None:
            data["total_capacity"] = self.total_capacity
        if self.available_count is not None:
            data["available_count"] = self.available_count
        if self.remaining_count is not None:
            data["remaining_count"] = self.remaining_count
        return data


@dataclass
class CalendarSources:
    """Raw rows feeding one resolution, plus the optional inclusive window"""
    ranges: Sequence[InventoryDateRange] = field(default_factory=list)
    overrides: Sequence[DailyOverride] = field(default_factory=list)
    blocks: Sequence[BlockedDate] = field(default_factory=list)
    start: Optional[date] = None
    end: Optional[date] = None

    def in_window(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


Calendar = Dict[date, CalendarEntry]
ResolutionPass = Callable[[Calendar, CalendarSources], None]


def iter_days(start: date, end: date) -> Iterator[date]:
    """Inclusive day iterator"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def seed_ranges(calendar: Calendar, sources: CalendarSources) -> None:
    overlapping: List[str] = []

    for date_range in sources.ranges:
        start = date_range.available_from_date
        end = date_range.available_to_date
        if sources.start is not None and sources.start > start:
            start = sources.start
        if sources.end is not None and sources.end < end:
            end = sources.end

        for day in iter_days(start, end):
            existing = calendar.get(day)
            if existing is not None and existing.date_range_id != date_range.id:
                overlapping.append(day.isoformat())
            # Later range in store order wins
            calendar[day] = CalendarEntry(
                date=day,
                price=date_range.base_price_per_day,
                available=True,
                source=SOURCE_RANGE,
                date_range_id=date_range.id,
            )

    if overlapping:
        logger.log_with_context(
            logging.WARNING,
            f"Overlapping active ranges cover {len(overlapping)} date(s)",
            entity_type="date_range",
            first_date=overlapping[0],
            last_date=overlapping[-1],
        )


def apply_overrides(calendar: Calendar, sources: CalendarSources) -> None:
    for override in sources.overrides:
        day = override.override_date
        if not sources.in_window(day):
            continue

        entry = calendar.get(day)
        if entry is None:
            if override.date_range_id is not None:
                # Its range was replaced and the date is no longer covered
                continue
            entry = CalendarEntry(
                date=day,
                price=override.price if override.price is not None else 0,
                available=True,
                source=SOURCE_OVERRIDE,
            )
            calendar[day] = entry

        if override.price is not None:
            entry.price = override.price
        if override.total_capacity is not None:
            entry.total_capacity = override.total_capacity
        if override.available_count is not None:
            entry.available_count = override.available_count
            entry.remaining_count = max(override.available_count, 0)
        entry.source = SOURCE_OVERRIDE


def infer_booked_state(calendar: Calendar, sources: CalendarSources) -> None:
    for entry in calendar.values():
        if entry.total_capacity is None or entry.available_count is None:
            continue
        if entry.total_capacity > entry.available_count:
            entry.available = False
            entry.source = SOURCE_BOOKED


def apply_blocks(calendar: Calendar, sources: CalendarSources) -> None:
    for block in sources.blocks:
        day = block.blocked_date
        if not sources.in_window(day):
            continue

        entry = calendar.get(day)
        if entry is None:
            calendar[day] = CalendarEntry(date=day, price=0, available=False, source=SOURCE_BLOCKED)
            continue
        entry.available = False
        entry.source = SOURCE_BLOCKED


RESOLUTION_PASSES: List[ResolutionPass] = [
    seed_ranges,
    apply_overrides,
    infer_booked_state,
    apply_blocks,
]


def merge_calendar(sources: CalendarSources) -> Dict[str, CalendarEntry]:
    """Run every pass in precedence order; output keyed by YYYY-MM-DD, ascending"""
    calendar: Calendar = {}
    for resolution_pass in RESOLUTION_PASSES:
        resolution_pass(calendar, sources)
    return {day.isoformat(): calendar[day] for day in sorted(calendar)}


def month_bounds(month: str) -> tuple:
    """'2024-06' -> (date(2024, 6, 1), date(2024, 6, 30))"""
    try:
        year_str, month_str = month.split("-")
        year, month_num = int(year_str), int(month_str)
        last_day = _calendar.monthrange(year, month_num)[1]
        return date(year, month_num, 1), date(year, month_num, last_day)
    except (ValueError, AttributeError):
        raise ValidationError("month must look like YYYY-MM", month=month)


class AvailabilityResolver:
    """
    Fetches raw rows for one scope and merges them.

    Store failures surface as StoreUnavailableError from the stores; the
    resolver never turns a failed fetch into an empty calendar.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ranges = RangeStore(db)
        self.overrides = OverrideStore(db)
        self.blocks = BlockStore(db)

    def load_sources(
        self,
        scope: InventoryScope,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> CalendarSources:
        return CalendarSources(
            ranges=self.ranges.list_active(scope, start, end),
            overrides=self.overrides.list_for_scope(scope, start, end),
            blocks=self.blocks.list_for_scope(scope, start, end),
            start=start,
            end=end,
        )

    def resolve(
        self,
        listing_id: str,
        variant_id: Optional[str] = None,
        slot_definition_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Dict[str, CalendarEntry]:
        """
        Resolved calendar for one scope.

        variant_id=None means the unscoped default variant, not "any variant".
        start/end optionally clip the output to an inclusive window.
        """
        scope = InventoryScope.of(listing_id, variant_id, slot_definition_id)
        if start is not None and end is not None and start > end:
            raise ValidationError("start must not be after end", start=start.isoformat(), end=end.isoformat())

        return merge_calendar(self.load_sources(scope, start, end))

    def resolve_month(
        self,
        listing_id: str,
        month: str,
        variant_id: Optional[str] = None,
        slot_definition_id: Optional[str] = None,
    ) -> Dict[str, CalendarEntry]:
        start, end = month_bounds(month)
        return self.resolve(listing_id, variant_id, slot_definition_id, start, end)


def get_availability_resolver(db: Session) -> AvailabilityResolver:
    """Factory function to get a resolver instance"""
    return AvailabilityResolver(db)
