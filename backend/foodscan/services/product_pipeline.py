"""
Product Data Pipeline

Orchestrates fetching, scoring and storing product data:

1. Checks the local store first (an existing record is returned as is)
2. Fetches from external sources in priority order on a miss
3. Derives health score and warnings from ingredients and nutrition
4. Persists the product exactly once

Also drives best-effort bulk population from search terms, where a single
bad term or product never aborts the batch.

Everything runs sequentially inside the caller's task: no fan-out, no
retries, no locking. Concurrent first scans of one barcode are arbitrated
by the store's unique constraint; the loser gets StoreConflictError.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from foodscan.core.constants import (
    MAX_SEARCH_TERMS,
    DEFAULT_LIMIT_PER_TERM,
    MIN_LIMIT_PER_TERM,
    MAX_LIMIT_PER_TERM,
)
from foodscan.core.exceptions import FoodScanError, ProductPipelineError
from foodscan.models.product import Product
from foodscan.schemas.product import BulkImportResult, NormalizedProduct, SearchResult
from foodscan.services.health_score import analyze_product
from foodscan.services.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class ProductSource(Protocol):
    """Contract of an external product source adapter."""

    SOURCE: str

    async def fetch_by_barcode(self, barcode: str) -> Optional[NormalizedProduct]:
        ...

    async def search_products(self, term: str, page: int = 1, page_size: int = 20) -> SearchResult:
        ...


class ProductDataPipeline:
    """
    Lookup -> fetch -> derive -> persist for one barcode at a time.

    Args:
        repository: Product store bound to the caller's session
        sources: External sources in priority order (first one is also used for search)
    """

    def __init__(self, repository: ProductRepository, sources: Sequence[ProductSource]):
        if not sources:
            raise ValueError("ProductDataPipeline needs at least one product source")
        self.repository = repository
        self.sources = list(sources)

    async def fetch_and_store_product(self, barcode: str) -> Optional[Product]:
        """
        Resolve a barcode to a stored product.

        Returns:
            The existing or newly created Product, or None when no source knows it

        Raises:
            StoreConflictError: another caller stored the barcode first (not retried)
            StoreError / ProductPipelineError: unexpected failures, with the barcode attached
        """
        logger.info(f"[Pipeline] Starting lookup for barcode {barcode}")
        try:
            existing = self.repository.find_by_barcode(barcode)
            if existing:
                logger.info(f"[Pipeline] Product {barcode} already in store (id={existing.id}, source={existing.source})")
                return existing

            normalized = await self._fetch_from_sources(barcode)
            if normalized is None:
                logger.info(f"[Pipeline] Product {barcode} not found on any source")
                return None

            analyzed = analyze_product(normalized)
            product = self.repository.create(analyzed)

            logger.info(
                f"[Pipeline] Product {barcode} stored (id={product.id}, source={product.source}, "
                f"health_score={product.health_score}, warnings={len(product.warnings)})"
            )
            return product

        except FoodScanError as e:
            logger.error(f"[Pipeline] Failed for barcode {barcode}: {e}")
            raise e.add_context(barcode=barcode)
        except Exception as e:
            logger.error(f"[Pipeline] Unexpected error for barcode {barcode}: {e}", exc_info=True)
            raise ProductPipelineError(
                f"Failed to fetch and store product: {e}",
                context={"barcode": barcode},
            ) from e

    async def _fetch_from_sources(self, barcode: str) -> Optional[NormalizedProduct]:
        """Try every source in order; a failing source is logged and skipped."""
        for source in self.sources:
            try:
                product = await source.fetch_by_barcode(barcode)
            except FoodScanError as e:
                logger.error(
                    f"[Pipeline] Source {source.SOURCE} failed for {barcode} "
                    f"(status={e.status_code}): {e}"
                )
                continue
            except Exception as e:
                logger.error(
                    f"[Pipeline] Source {source.SOURCE} raised unexpectedly for {barcode}: {e}",
                    exc_info=True,
                )
                continue

            if product is not None:
                logger.info(f"[Pipeline] Product {barcode} found on {source.SOURCE}")
                return product

        return None

    async def import_products_by_search(
        self,
        search_terms: List[str],
        limit_per_term: int = DEFAULT_LIMIT_PER_TERM
    ) -> BulkImportResult:
        """
        Populate the store from free-text searches.

        Terms and their results are processed one by one. Existing barcodes
        count as duplicates; new ones go through fetch_and_store_product so
        they are scored exactly like a single lookup. Any failure for a term
        or a product is counted and described in details, then skipped.
        """
        result = BulkImportResult()
        terms = search_terms[:MAX_SEARCH_TERMS]
        limit = min(max(limit_per_term, MIN_LIMIT_PER_TERM), MAX_LIMIT_PER_TERM)
        search_source = self.sources[0]

        logger.info(f"[Pipeline] Bulk import started: terms={terms}, limit_per_term={limit}")

        for term in terms:
            try:
                search = await search_source.search_products(term, 1, limit)
            except Exception as e:
                result.errors += 1
                result.details.append(f'Failed to search "{term}": {e}')
                logger.warning(f"[Pipeline] Search failed for '{term}': {e}")
                continue

            logger.info(
                f"[Pipeline] Search '{term}' returned {len(search.products)} products, "
                f"{len(search.rejected)} rejected"
            )

            for hit in search.rejected:
                result.errors += 1
                result.details.append(f"Failed to import {hit.barcode or 'unknown product'}: {hit.reason}")

            for candidate in search.products[:limit]:
                try:
                    if self.repository.find_by_barcode(candidate.barcode):
                        result.duplicates += 1
                        continue

                    product = await self.fetch_and_store_product(candidate.barcode)
                    if product is None:
                        result.errors += 1
                        result.details.append(f"Product {candidate.barcode} not found on any source")
                        continue

                    result.imported += 1
                except Exception as e:
                    result.errors += 1
                    result.details.append(f"Failed to import {candidate.barcode}: {e}")
                    logger.warning(f"[Pipeline] Import failed for {candidate.barcode}: {e}")

        logger.info(
            f"[Pipeline] Bulk import completed: imported={result.imported}, "
            f"duplicates={result.duplicates}, errors={result.errors}"
        )
        return result
