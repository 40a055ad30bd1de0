"""
Inventory Scope

Canonical composite key for (listing, variant, slot). A missing variant or
slot is normalised to the empty string so that "no variant" is a concrete
value that only matches the unscoped default variant, never every variant.
"""

from dataclasses import dataclass
from typing import Optional

from ..utils.errors import ValidationError

_SEPARATOR = "|"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class InventoryScope:
    listing_id: str
    variant_id: Optional[str] = None
    slot_definition_id: Optional[str] = None

    @classmethod
    def of(
        cls,
        listing_id: Optional[str],
        variant_id: Optional[str] = None,
        slot_definition_id: Optional[str] = None,
    ) -> "InventoryScope":
        """Build a scope, rejecting a blank listing id and folding "" to None"""
        listing = _clean(listing_id)
        if not listing:
            raise ValidationError("listing_id is required")
        for part in (listing, _clean(variant_id), _clean(slot_definition_id)):
            if part and _SEPARATOR in part:
                raise ValidationError(f"Identifiers may not contain '{_SEPARATOR}'", value=part)
        return cls(listing, _clean(variant_id), _clean(slot_definition_id))

    @property
    def key(self) -> str:
        return _SEPARATOR.join((self.listing_id, self.variant_id or "", self.slot_definition_id or ""))

    @property
    def block_scope(self) -> "InventoryScope":
        """Blocks apply to every slot of a listing/variant"""
        if self.slot_definition_id is None:
            return self
        return InventoryScope(self.listing_id, self.variant_id, None)

    def row_fields(self) -> dict:
        """Column values for a new row in this scope"""
        return {
            "listing_id": self.listing_id,
            "variant_id": self.variant_id,
            "slot_definition_id": self.slot_definition_id,
            "scope_key": self.key,
        }
