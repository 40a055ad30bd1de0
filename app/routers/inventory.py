"""
Inventory API Router

Thin layer over the inventory services. InventoryError raised by the
services is turned into a JSON response by the handler in main.py.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.availability_resolver import AvailabilityResolver, month_bounds
from ..services.inventory_service import InventoryService
from ..services.range_mutator import RangeMutator
from ..schemas.inventory import (
    BlockCreate,
    BlockDelete,
    BlockListResponse,
    BlockResponse,
    CalendarResponse,
    ConsumeRequest,
    DateRangeListResponse,
    DateRangeResponse,
    DateRangeUpdate,
    DateRangeUpsert,
    OverrideDelete,
    OverrideResponse,
    OverrideUpsert,
    RemovedResponse,
)
from ..utils.rate_limiter import limiter, RATE_LIMITS

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


def _calendar_response(
    listing_id: str,
    variant_id: Optional[str],
    slot_definition_id: Optional[str],
    start: Optional[date],
    end: Optional[date],
    days: dict,
) -> dict:
    return {
        "listing_id": listing_id,
        "variant_id": variant_id,
        "slot_definition_id": slot_definition_id,
        "start": start,
        "end": end,
        "days": {key: entry.to_dict() for key, entry in days.items()},
    }


# ==================
# Calendar
# ==================

@router.get("/calendar/{listing_id}", response_model=CalendarResponse)
@limiter.limit(RATE_LIMITS["calendar_read"])
async def get_calendar(
    request: Request,
    listing_id: str,
    variant_id: Optional[str] = Query(None),
    slot_definition_id: Optional[str] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Resolved per-date calendar, optionally clipped to [start, end]"""
    days = AvailabilityResolver(db).resolve(listing_id, variant_id, slot_definition_id, start, end)
    return _calendar_response(listing_id, variant_id, slot_definition_id, start, end, days)


@router.get("/calendar/{listing_id}/month/{month}", response_model=CalendarResponse)
@limiter.limit(RATE_LIMITS["calendar_read"])
async def get_month_calendar(
    request: Request,
    listing_id: str,
    month: str,
    variant_id: Optional[str] = Query(None),
    slot_definition_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Calendar for one YYYY-MM month"""
    start, end = month_bounds(month)
    days = AvailabilityResolver(db).resolve(listing_id, variant_id, slot_definition_id, start, end)
    return _calendar_response(listing_id, variant_id, slot_definition_id, start, end, days)


# ==================
# Ranges
# ==================

@router.get("/ranges/{listing_id}", response_model=DateRangeListResponse)
async def list_ranges(
    listing_id: str,
    variant_id: Optional[str] = Query(None),
    slot_definition_id: Optional[str] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    ranges = RangeMutator(db).list_ranges(listing_id, variant_id, slot_definition_id, start, end)
    return {"items": ranges, "total": len(ranges)}


@router.get("/ranges/{listing_id}/on/{day}", response_model=DateRangeResponse)
async def get_range_for_date(
    listing_id: str,
    day: date,
    variant_id: Optional[str] = Query(None),
    slot_definition_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """The active range covering one date (404 when none does)"""
    return RangeMutator(db).get_range_for_date(listing_id, variant_id, day, slot_definition_id)


@router.put("/ranges", response_model=DateRangeResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def upsert_range(request: Request, payload: DateRangeUpsert, db: Session = Depends(get_db)):
    """Create a range, replacing every active range it overlaps"""
    return RangeMutator(db).upsert_range(
        payload.listing_id,
        payload.variant_id,
        payload.from_date,
        payload.to_date,
        payload.base_price_per_day,
        payload.total_capacity,
        payload.slot_definition_id,
    )


@router.patch("/ranges/{range_id}", response_model=DateRangeResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def update_range(
    request: Request,
    range_id: str,
    payload: DateRangeUpdate,
    db: Session = Depends(get_db),
):
    return RangeMutator(db).update_range(range_id, **payload.model_dump(exclude_unset=True))


@router.delete("/ranges/{range_id}", status_code=204)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def delete_range(request: Request, range_id: str, db: Session = Depends(get_db)):
    RangeMutator(db).delete_range(range_id)


# ==================
# Blocks
# ==================

@router.post("/blocks", response_model=BlockResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def block_date(request: Request, payload: BlockCreate, db: Session = Depends(get_db)):
    """Block a date for a listing/variant (idempotent)"""
    return InventoryService(db).block(
        payload.listing_id,
        payload.variant_id,
        payload.date,
        payload.created_by,
        reason=payload.reason,
        slot_definition_id=payload.slot_definition_id,
    )


@router.delete("/blocks", response_model=RemovedResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def unblock_date(request: Request, payload: BlockDelete, db: Session = Depends(get_db)):
    removed = InventoryService(db).unblock(payload.listing_id, payload.variant_id, payload.date)
    return {"removed": removed}


@router.get("/blocks/{listing_id}", response_model=BlockListResponse)
async def list_blocks(
    listing_id: str,
    variant_id: Optional[str] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    blocks = InventoryService(db).list_blocks(listing_id, variant_id, start, end)
    return {"items": blocks, "total": len(blocks)}


# ==================
# Overrides
# ==================

@router.put("/overrides", response_model=OverrideResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def upsert_override(request: Request, payload: OverrideUpsert, db: Session = Depends(get_db)):
    """Create or patch the price/capacity override for one date"""
    return InventoryService(db).upsert_override(
        payload.listing_id,
        payload.variant_id,
        payload.date,
        price=payload.price,
        available_count=payload.available_count,
        total_capacity=payload.total_capacity,
        slot_definition_id=payload.slot_definition_id,
    )


@router.delete("/overrides", response_model=RemovedResponse)
@limiter.limit(RATE_LIMITS["inventory_write"])
async def remove_override(request: Request, payload: OverrideDelete, db: Session = Depends(get_db)):
    removed = InventoryService(db).remove_override(
        payload.listing_id, payload.variant_id, payload.date, payload.slot_definition_id
    )
    return {"removed": removed}


@router.post("/consume", response_model=OverrideResponse)
@limiter.limit(RATE_LIMITS["capacity_consume"])
async def consume_capacity(request: Request, payload: ConsumeRequest, db: Session = Depends(get_db)):
    """Take units from a date's remaining capacity for a booking"""
    return InventoryService(db).consume_capacity(
        payload.listing_id,
        payload.variant_id,
        payload.date,
        units=payload.units,
        slot_definition_id=payload.slot_definition_id,
    )
