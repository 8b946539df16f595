"""
Product Model
Canonical product record resolved from a scanned barcode.

A product is created exactly once per barcode, either manually or by the
data pipeline on the first successful external fetch. Health score and
warnings are derived by the pipeline and never supplied by the client.
"""

from sqlalchemy import Column, String, Text, Integer, JSON, Index, CheckConstraint, text

from foodscan.core.constants import SOURCE_MANUAL
from foodscan.models.base import BaseModel


class Product(BaseModel):
    """
    Product Model

    Identity is the store-assigned id plus the globally unique barcode.
    (source, external_id) is unique only among rows that have an external_id,
    so manual entries can share a NULL external_id.
    """
    __tablename__ = "products"

    barcode = Column(String(32), nullable=False, unique=True, index=True)

    # Basic info
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)

    # Content, as parsed by the adapter (ordered lists of strings)
    ingredients = Column(JSON, nullable=False, default=list)
    allergens = Column(JSON, nullable=False, default=list)

    # Derived by the pipeline
    warnings = Column(JSON, nullable=False, default=list)
    health_score = Column(Integer, nullable=True)  # 1-10, NULL = not computed

    # Nutrition per serving; absent keys are omitted, never zero-filled
    # {"calories": 250.0, "sodium": 0.4, "serving_size": "100g", ...}
    nutrition_info = Column(JSON, nullable=True)

    # Source tracking
    source = Column(String(50), nullable=False, default=SOURCE_MANUAL)  # manual, openfoodfacts
    external_id = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "health_score IS NULL OR (health_score >= 1 AND health_score <= 10)",
            name="ck_products_health_score_range",
        ),
        Index("idx_products_name", "name"),
        Index(
            "idx_products_source_external_id",
            "source",
            "external_id",
            unique=True,
            postgresql_where=text("external_id IS NOT NULL"),
            sqlite_where=text("external_id IS NOT NULL"),
        ),
    )

    def __repr__(self):
        return f"<Product(barcode={self.barcode}, name='{self.name}')>"
