"""
Application Exceptions

Typed errors raised by the product data pipeline and its collaborators.

Hierarchy:
    FoodScanError
    ├── AdapterError
    │   ├── AdapterTransportError  (network, timeout, non-2xx other than 404)
    │   └── AdapterDataError       (malformed upstream payload)
    ├── StoreError
    │   ├── StoreConflictError     (unique barcode / source+external_id)
    │   └── StoreNotFoundError     (update of a missing id)
    └── ProductPipelineError       (unexpected failure wrapped with context)

"Product not found" is never an exception: lookups return None.
"""

from typing import Any, Dict, Optional


class FoodScanError(Exception):
    """Base exception carrying an optional status code and context."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.context: Dict[str, Any] = dict(context or {})
        super().__init__(message)

    def add_context(self, **context: Any) -> "FoodScanError":
        """Attach extra context (barcode, search term, ...) without overwriting existing keys."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class AdapterError(FoodScanError):
    """Failure talking to an external product source."""


class AdapterTransportError(AdapterError):
    """Network error, timeout, or unexpected HTTP status from the provider."""


class AdapterDataError(AdapterError):
    """Provider answered but the payload cannot be turned into a product."""


class StoreError(FoodScanError):
    """Failure in the product store (connectivity, SQL errors)."""


class StoreConflictError(StoreError):
    """Uniqueness violation on barcode or (source, external_id)."""


class StoreNotFoundError(StoreError):
    """Referenced product id does not exist."""


class ProductPipelineError(FoodScanError):
    """Unexpected error inside the pipeline, wrapped with the barcode."""
