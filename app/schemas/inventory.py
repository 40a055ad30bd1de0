"""
Inventory Schemas

Pydantic models for inventory API requests and responses.
Amounts are integers in the smallest currency unit.
"""

from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class ScopeBase(BaseModel):
    """Listing / variant / slot a write applies to"""
    listing_id: str = Field(..., min_length=1, max_length=36)
    variant_id: Optional[str] = Field(None, max_length=36, description="Omit for the unscoped default variant")
    slot_definition_id: Optional[str] = Field(None, max_length=36)

    @field_validator('listing_id', 'variant_id', 'slot_definition_id')
    @classmethod
    def validate_ids(cls, v):
        if v is not None and "|" in v:
            raise ValueError("ids must not contain '|'")
        return v


# ==================
# Ranges
# ==================

class DateRangeUpsert(ScopeBase):
    """Schema for creating/replacing a date range"""
    from_date: date
    to_date: date
    base_price_per_day: int = Field(..., ge=0)
    total_capacity: int = Field(default=1, ge=1)

    @model_validator(mode='after')
    def check_order(self):
        if self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self


class DateRangeUpdate(BaseModel):
    """Schema for patching a date range"""
    base_price_per_day: Optional[int] = Field(None, ge=0)
    total_capacity: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class DateRangeResponse(BaseModel):
    id: str
    listing_id: str
    variant_id: Optional[str] = None
    slot_definition_id: Optional[str] = None
    available_from_date: date
    available_to_date: date
    base_price_per_day: int
    total_capacity: int
    is_active: bool

    class Config:
        from_attributes = True


# ==================
# Blocks
# ==================

class BlockCreate(ScopeBase):
    """slot_definition_id only feeds the default reason"""
    date: date
    created_by: str = Field(..., min_length=1, max_length=36, description="Operator id, kept for audit")
    reason: Optional[str] = Field(None, max_length=255)


class BlockDelete(BaseModel):
    listing_id: str = Field(..., min_length=1, max_length=36)
    variant_id: Optional[str] = Field(None, max_length=36)
    date: date


class BlockResponse(BaseModel):
    id: str
    listing_id: str
    variant_id: Optional[str] = None
    blocked_date: date
    reason: Optional[str] = None
    created_by_operator_id: str

    class Config:
        from_attributes = True


# ==================
# Overrides
# ==================

class OverrideUpsert(ScopeBase):
    """Only supplied fields change on an existing override"""
    date: date
    price: Optional[int] = Field(None, ge=0)
    available_count: Optional[int] = Field(None, ge=0)
    total_capacity: Optional[int] = Field(None, ge=0)

    @model_validator(mode='after')
    def check_capacity(self):
        if (
            self.available_count is not None
            and self.total_capacity is not None
            and self.available_count > self.total_capacity
        ):
            raise ValueError("available_count cannot exceed total_capacity")
        return self


class OverrideDelete(ScopeBase):
    date: date


class OverrideResponse(BaseModel):
    id: str
    listing_id: str
    variant_id: Optional[str] = None
    slot_definition_id: Optional[str] = None
    date_range_id: Optional[str] = None
    override_date: date
    price: Optional[int] = None
    total_capacity: Optional[int] = None
    available_count: Optional[int] = None
    trigger_type: str

    class Config:
        from_attributes = True


class ConsumeRequest(ScopeBase):
    """Booking-side capacity consumption"""
    date: date
    units: int = Field(default=1, ge=1)


class RemovedResponse(BaseModel):
    removed: int


# ==================
# Calendar
# ==================

class CalendarEntryResponse(BaseModel):
    date: date
    price: int
    available: bool
    source: str
    total_capacity: Optional[int] = None
    available_count: Optional[int] = None
    remaining_count: Optional[int] = None

    class Config:
        from_attributes = True


class CalendarResponse(BaseModel):
    """Resolved calendar keyed by YYYY-MM-DD, ascending"""
    listing_id: str
    variant_id: Optional[str] = None
    slot_definition_id: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    days: Dict[str, CalendarEntryResponse]


class DateRangeListResponse(BaseModel):
    items: List[DateRangeResponse]
    total: int


class BlockListResponse(BaseModel):
    items: List[BlockResponse]
    total: int
