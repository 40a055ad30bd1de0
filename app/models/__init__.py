# Models package
from .inventory_date_range import InventoryDateRange
from .daily_override import DailyOverride, TriggerType
from .blocked_date import BlockedDate

__all__ = [
    "InventoryDateRange",
    "DailyOverride", "TriggerType",
    "BlockedDate",
]
