# Services package
from .inventory_scope import InventoryScope
from .availability_resolver import (
    AvailabilityResolver, CalendarEntry, CalendarSources,
    merge_calendar, month_bounds, get_availability_resolver
)
from .range_mutator import RangeMutator, get_range_mutator
from .inventory_service import InventoryService, get_inventory_service
from .payment_calculator import (
    PaymentCalculationInput, PaymentBreakdown, calculate_payment_breakdown,
    quantity_for_booking_format, to_minor_units, from_minor_units, format_amount
)

__all__ = [
    "InventoryScope",
    "AvailabilityResolver", "CalendarEntry", "CalendarSources",
    "merge_calendar", "month_bounds", "get_availability_resolver",
    "RangeMutator", "get_range_mutator",
    "InventoryService", "get_inventory_service",
    "PaymentCalculationInput", "PaymentBreakdown", "calculate_payment_breakdown",
    "quantity_for_booking_format", "to_minor_units", "from_minor_units", "format_amount",
]
