"""
Product Repository

Durable CRUD over the products table with uniqueness enforcement.

The database constraints are the source of truth:
- barcode is unique
- (source, external_id) is unique where external_id is not NULL

Integrity violations surface as StoreConflictError; any other database
failure surfaces as StoreError. find_or_create is a plain read-then-write
with no locking, so a concurrent creator can still produce a conflict.
"""

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from foodscan.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from foodscan.core.exceptions import StoreConflictError, StoreError, StoreNotFoundError
from foodscan.models.product import Product
from foodscan.models.base import utcnow
from foodscan.schemas.product import NormalizedProduct, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _nutrition_to_json(nutrition_info) -> Optional[dict]:
    if nutrition_info is None:
        return None
    return nutrition_info.model_dump(exclude_none=True)


class ProductRepository:
    """Product store bound to one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        try:
            return self.db.query(Product).filter(Product.barcode == barcode).first()
        except SQLAlchemyError as e:
            logger.error(f"[ProductStore] Lookup failed for barcode {barcode}: {e}")
            raise StoreError("Failed to look up product", context={"barcode": barcode}) from e

    def get_by_id(self, product_id: UUID) -> Optional[Product]:
        try:
            return self.db.query(Product).filter(Product.id == product_id).first()
        except SQLAlchemyError as e:
            logger.error(f"[ProductStore] Lookup failed for id {product_id}: {e}")
            raise StoreError("Failed to look up product", context={"id": str(product_id)}) from e

    def create(self, data: Union[ProductCreate, NormalizedProduct]) -> Product:
        """
        Insert a new product. id, created_at and updated_at are assigned here.

        Raises:
            StoreConflictError: barcode or (source, external_id) already taken
            StoreError: any other database failure
        """
        product = Product(
            barcode=data.barcode,
            name=data.name,
            brand=data.brand,
            description=data.description,
            image_url=data.image_url,
            ingredients=list(data.ingredients),
            allergens=list(data.allergens),
            warnings=list(data.warnings),
            health_score=data.health_score,
            nutrition_info=_nutrition_to_json(data.nutrition_info),
            source=data.source,
            # "" from an adapter means "no id": store NULL so id-less rows never collide
            external_id=data.external_id or None,
        )

        self.db.add(product)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"[ProductStore] Conflict creating product {data.barcode} ({data.source}/{data.external_id})")
            raise StoreConflictError(
                "Product already exists",
                context={"barcode": data.barcode, "source": data.source},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[ProductStore] Failed to create product {data.barcode}: {e}")
            raise StoreError("Failed to create product", context={"barcode": data.barcode}) from e

        self.db.refresh(product)
        logger.info(f"[ProductStore] Created product {product.barcode}: {product.name} (id={product.id})")
        return product

    def update(self, product_id: UUID, data: ProductUpdate) -> Product:
        """
        Merge the fields set on data into an existing product and bump updated_at.

        Raises:
            StoreNotFoundError: no product with this id
            StoreConflictError: the change violates (source, external_id) uniqueness
        """
        product = self.get_by_id(product_id)
        if not product:
            raise StoreNotFoundError("Product not found", context={"id": str(product_id)})

        update_data = data.model_dump(exclude_unset=True)
        if "nutrition_info" in update_data:
            update_data["nutrition_info"] = _nutrition_to_json(data.nutrition_info)
        if "external_id" in update_data:
            update_data["external_id"] = update_data["external_id"] or None

        for field, value in update_data.items():
            setattr(product, field, value)
        product.updated_at = utcnow()

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise StoreConflictError(
                "Product update conflicts with an existing product",
                context={"id": str(product_id)},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[ProductStore] Failed to update product {product_id}: {e}")
            raise StoreError("Failed to update product", context={"id": str(product_id)}) from e

        self.db.refresh(product)
        return product

    def find_or_create(self, barcode: str, data: Union[ProductCreate, NormalizedProduct]) -> Product:
        """Return the product for barcode, creating it from data on a miss."""
        existing = self.find_by_barcode(barcode)
        if existing:
            return existing
        return self.create(data)

    def list_paginated(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> List[Product]:
        """Newest products first, offset based."""
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        try:
            return (
                self.db.query(Product)
                .order_by(Product.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"[ProductStore] Listing failed: {e}")
            raise StoreError("Failed to list products") from e

    def count(self) -> int:
        try:
            return self.db.query(Product).count()
        except SQLAlchemyError as e:
            raise StoreError("Failed to count products") from e
