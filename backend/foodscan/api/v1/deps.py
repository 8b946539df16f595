"""
API Dependencies
Common dependencies used across API endpoints.

This module provides:
- Database session management (re-exported from db.session)
- The Open Food Facts client shared by every request
- A ProductDataPipeline built around the request's session

Dependencies are injected into FastAPI endpoints using Depends().
Tests replace them through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from foodscan.core.config import settings
from foodscan.db.session import get_db
from foodscan.integrations.openfoodfacts import OpenFoodFactsClient
from foodscan.services.product_pipeline import ProductDataPipeline
from foodscan.services.product_repository import ProductRepository


@lru_cache
def get_openfoodfacts_client() -> OpenFoodFactsClient:
    """Open Food Facts client configured from settings (one per process)."""
    return OpenFoodFactsClient(
        base_url=settings.OPENFOODFACTS_BASE_URL,
        user_agent=settings.OPENFOODFACTS_USER_AGENT,
        timeout=settings.OPENFOODFACTS_TIMEOUT,
    )


def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def get_product_pipeline(
    repository: ProductRepository = Depends(get_product_repository),
    client: OpenFoodFactsClient = Depends(get_openfoodfacts_client),
) -> ProductDataPipeline:
    """
    Build the pipeline for one request.

    Sources are listed in priority order; Open Food Facts is the only one today.
    """
    return ProductDataPipeline(repository=repository, sources=[client])
