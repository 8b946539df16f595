"""
Products API Endpoints
Thin HTTP layer over the product data pipeline.

Endpoints:
    - GET /products/barcode/{barcode} - Local store lookup only
    - POST /products/barcode/{barcode}/fetch - Full pipeline (store, then Open Food Facts)
    - POST /products/bulk-import - Populate the store from search terms
    - GET /products - Administrative listing, newest first

Result mapping: product -> 200, not found -> 404, pipeline/store error -> 500.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from foodscan.api.v1.deps import get_product_pipeline, get_product_repository
from foodscan.core.constants import BARCODE_PATTERN, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from foodscan.core.exceptions import FoodScanError
from foodscan.schemas.product import (
    BulkImportRequest,
    BulkImportResult,
    ProductListResponse,
    ProductResponse,
)
from foodscan.services.product_pipeline import ProductDataPipeline
from foodscan.services.product_repository import ProductRepository

logger = logging.getLogger(__name__)

# Prefix: /api/v1/products
router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=ProductListResponse)
def list_products(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Products per page"),
    repository: ProductRepository = Depends(get_product_repository),
):
    """List stored products, newest first (administrative use)."""
    try:
        products = repository.list_paginated(page=page, limit=limit)
        total = repository.count()
    except FoodScanError as e:
        logger.error(f"[ProductsAPI] Listing failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while listing products"
        )

    return ProductListResponse(
        products=[ProductResponse.model_validate(product) for product in products],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/barcode/{barcode}", response_model=ProductResponse)
def get_product_by_barcode(
    barcode: str = Path(..., pattern=BARCODE_PATTERN, description="Product barcode: 8-32 digits"),
    repository: ProductRepository = Depends(get_product_repository),
):
    """
    Look up a product in the local store only.

    Does not contact external sources; use the /fetch endpoint for that.
    """
    try:
        product = repository.find_by_barcode(barcode)
    except FoodScanError as e:
        logger.error(f"[ProductsAPI] Lookup failed for {barcode}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while fetching the product"
        )

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PRODUCT_NOT_FOUND")

    return product


@router.post("/barcode/{barcode}/fetch", response_model=ProductResponse)
async def fetch_product_from_external(
    barcode: str = Path(..., pattern=BARCODE_PATTERN, description="Product barcode: 8-32 digits"),
    pipeline: ProductDataPipeline = Depends(get_product_pipeline),
):
    """
    Resolve a barcode through the full pipeline.

    Returns the stored product if present, otherwise fetches it from
    Open Food Facts, scores it and stores it.
    """
    try:
        product = await pipeline.fetch_and_store_product(barcode)
    except FoodScanError as e:
        logger.error(f"[ProductsAPI] Pipeline failed for {barcode}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while fetching the product"
        )

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PRODUCT_NOT_FOUND")

    return product


@router.post("/bulk-import", response_model=BulkImportResult)
async def bulk_import_products(
    payload: BulkImportRequest,
    pipeline: ProductDataPipeline = Depends(get_product_pipeline),
):
    """
    Import products found by free-text search terms.

    Partial failures are reported in the counters and details, not as errors.
    """
    return await pipeline.import_products_by_search(
        payload.search_terms,
        limit_per_term=payload.limit_per_term,
    )
