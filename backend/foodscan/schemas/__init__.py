"""
Pydantic Schemas Module
Contains request/response schemas for API validation and serialization.

Pydantic schemas are used for:
- Validating incoming request data
- Carrying normalized provider data through the pipeline
- Serializing database models to JSON responses
"""

from foodscan.schemas.product import (
    NutritionInfo,
    NormalizedProduct,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    SearchResult,
    RejectedSearchHit,
    BulkImportRequest,
    BulkImportResult,
)

__all__ = [
    "NutritionInfo",
    "NormalizedProduct",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "SearchResult",
    "RejectedSearchHit",
    "BulkImportRequest",
    "BulkImportResult",
]
