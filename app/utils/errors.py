"""
Inventory Error Taxonomy

Every failure the inventory core reports is one of these. Services raise
them, a single FastAPI handler in main.py turns them into JSON responses.

- ValidationError: missing/malformed input, raised before the store is touched
- NotFoundError: a range/override/block addressed by id or key does not exist
- ConflictError: a store-level uniqueness/overlap rule or a capacity check rejected the write
- StoreUnavailableError: the persistence layer could not be reached or failed mid-call
"""

from typing import Any, Dict, Optional


class InventoryError(Exception):
    """Base class for errors surfaced by the inventory and payment core"""

    status_code = 500
    error_code = "inventory_error"

    def __init__(self, detail: str, **context: Any):
        super().__init__(detail)
        self.detail = detail
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.detail, "error": self.error_code}
        if self.context:
            body["context"] = self.context
        return body


class ValidationError(InventoryError):
    status_code = 422
    error_code = "validation_error"


class NotFoundError(InventoryError):
    status_code = 404
    error_code = "not_found"


class ConflictError(InventoryError):
    status_code = 409
    error_code = "conflict"


class StoreUnavailableError(InventoryError):
    status_code = 503
    error_code = "store_unavailable"

    def __init__(self, detail: str = "Inventory store is unavailable", operation: Optional[str] = None, **context: Any):
        if operation:
            context["operation"] = operation
        super().__init__(detail, **context)
