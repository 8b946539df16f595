"""
Product Pydantic Schemas
Request and response models for the product pipeline and the Products API.

These schemas define:
- NutritionInfo: optional per-serving nutrition facts
- NormalizedProduct: provider-agnostic adapter output
- ProductCreate / ProductUpdate / ProductResponse: store and API shapes
- SearchResult, RejectedSearchHit, BulkImportRequest, BulkImportResult: bulk population
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

from foodscan.core.constants import (
    SOURCE_MANUAL,
    HEALTH_SCORE_MIN,
    HEALTH_SCORE_MAX,
    MAX_WARNINGS,
    MAX_INGREDIENTS,
    MAX_ALLERGENS,
    MAX_SEARCH_TERMS,
    DEFAULT_LIMIT_PER_TERM,
    MIN_LIMIT_PER_TERM,
    MAX_LIMIT_PER_TERM,
    BARCODE_MAX_LENGTH,
)


class NutritionInfo(BaseModel):
    """
    Nutrition facts schema.
    Every field is optional; absence means "unknown", never zero.
    """
    calories: Optional[float] = Field(None, description="Energy in kcal")
    protein: Optional[float] = Field(None, description="Protein in grams")
    carbohydrates: Optional[float] = Field(None, description="Carbohydrates in grams")
    fat: Optional[float] = Field(None, description="Fat in grams")
    saturated_fat: Optional[float] = Field(None, description="Saturated fat in grams")
    trans_fat: Optional[float] = Field(None, description="Trans fat in grams")
    cholesterol: Optional[float] = Field(None, description="Cholesterol in mg")
    sodium: Optional[float] = Field(None, description="Sodium in mg")
    dietary_fiber: Optional[float] = Field(None, description="Fiber in grams")
    sugars: Optional[float] = Field(None, description="Sugars in grams")

    # Vitamins and minerals
    vitamin_a: Optional[float] = Field(None, description="Vitamin A in IU")
    vitamin_c: Optional[float] = Field(None, description="Vitamin C in mg")
    calcium: Optional[float] = Field(None, description="Calcium in mg")
    iron: Optional[float] = Field(None, description="Iron in mg")
    potassium: Optional[float] = Field(None, description="Potassium in mg")

    serving_size: Optional[str] = Field(None, description="e.g. '100g' or '1 cup'")
    servings_per_container: Optional[float] = None


class ProductBase(BaseModel):
    """Descriptive and content fields shared by every product shape."""
    barcode: str = Field(..., min_length=1, max_length=BARCODE_MAX_LENGTH)
    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list, max_length=MAX_INGREDIENTS)
    allergens: List[str] = Field(default_factory=list, max_length=MAX_ALLERGENS)
    nutrition_info: Optional[NutritionInfo] = None
    source: str = Field(SOURCE_MANUAL, max_length=50)
    external_id: Optional[str] = None


class NormalizedProduct(ProductBase):
    """
    Provider-agnostic product produced by an external source adapter.

    health_score and warnings stay empty here; the pipeline derives them.
    """
    health_score: Optional[int] = Field(None, ge=HEALTH_SCORE_MIN, le=HEALTH_SCORE_MAX)
    warnings: List[str] = Field(default_factory=list, max_length=MAX_WARNINGS)


class ProductCreate(NormalizedProduct):
    """
    Schema for inserting a new product into the store.
    Hand-entered names and brands are capped; adapter output is not.
    """
    name: str = Field(..., min_length=1, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)


class ProductUpdate(BaseModel):
    """
    Schema for updating a product.
    All fields are optional. Barcode is immutable and not accepted.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    ingredients: Optional[List[str]] = Field(None, max_length=MAX_INGREDIENTS)
    allergens: Optional[List[str]] = Field(None, max_length=MAX_ALLERGENS)
    warnings: Optional[List[str]] = Field(None, max_length=MAX_WARNINGS)
    health_score: Optional[int] = Field(None, ge=HEALTH_SCORE_MIN, le=HEALTH_SCORE_MAX)
    nutrition_info: Optional[NutritionInfo] = None
    source: Optional[str] = Field(None, max_length=50)
    external_id: Optional[str] = Field(None, max_length=255)


class ProductResponse(BaseModel):
    """Response schema for a stored product."""
    id: UUID
    barcode: str
    name: str
    brand: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    ingredients: List[str] = []
    allergens: List[str] = []
    warnings: List[str] = []
    health_score: Optional[int] = None
    nutrition_info: Optional[NutritionInfo] = None
    source: str
    external_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Response schema for the paginated product listing."""
    products: List[ProductResponse]
    total: int
    page: int
    limit: int


class RejectedSearchHit(BaseModel):
    """Search hit that could not be turned into a product."""
    barcode: Optional[str] = None
    reason: str


class SearchResult(BaseModel):
    """
    One page of free-text search results from an external source.
    Hits that failed normalisation are listed in rejected, not in products.
    """
    products: List[NormalizedProduct] = []
    rejected: List[RejectedSearchHit] = []
    count: int = 0
    page_size: int = 0


class BulkImportRequest(BaseModel):
    """
    Bulk import payload.
    1-5 non-empty search terms (trimmed) and an optional per-term limit.
    """
    search_terms: List[str] = Field(..., min_length=1, max_length=MAX_SEARCH_TERMS)
    limit_per_term: int = Field(
        DEFAULT_LIMIT_PER_TERM, ge=MIN_LIMIT_PER_TERM, le=MAX_LIMIT_PER_TERM
    )

    @field_validator("search_terms")
    @classmethod
    def strip_terms(cls, value: List[str]) -> List[str]:
        terms = [term.strip() for term in value]
        if any(not term for term in terms):
            raise ValueError("Search terms must be non-empty")
        return terms


class BulkImportResult(BaseModel):
    """Aggregate outcome of a bulk import run."""
    imported: int = 0
    duplicates: int = 0
    errors: int = 0
    details: List[str] = []
