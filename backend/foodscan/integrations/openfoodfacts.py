"""
Open Food Facts API HTTP Client

This module provides an async HTTP client for the Open Food Facts database
and the normalisation of its product payloads into NormalizedProduct.
Open Food Facts is a free, open, collaborative database of food products from around the world.

API Documentation: https://wiki.openfoodfacts.org/API

Behaviour:
- "Not found" (HTTP 404 or payload status 0) is returned as None
- Any other transport failure raises AdapterTransportError
- A payload that cannot yield a barcode raises AdapterDataError
- In a search, such hits are skipped and reported in SearchResult.rejected
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from foodscan.core.constants import (
    SOURCE_OPENFOODFACTS,
    MAX_INGREDIENTS,
    MAX_ALLERGENS,
    UNKNOWN_PRODUCT_NAME,
    DEFAULT_SERVING_SIZE,
)
from foodscan.core.exceptions import AdapterDataError, AdapterTransportError
from foodscan.schemas.product import NormalizedProduct, NutritionInfo, RejectedSearchHit, SearchResult

logger = logging.getLogger(__name__)


SEARCH_FIELDS = "code,_id,product_name,generic_name,brands,image_url,nutriments,ingredients_text,allergens"

# NutritionInfo field -> Open Food Facts nutriment key (per 100g)
NUTRIENT_KEYS = {
    "calories": "energy-kcal_100g",
    "protein": "proteins_100g",
    "carbohydrates": "carbohydrates_100g",
    "fat": "fat_100g",
    "saturated_fat": "saturated-fat_100g",
    "trans_fat": "trans-fat_100g",
    "cholesterol": "cholesterol_100g",
    "sodium": "sodium_100g",
    "dietary_fiber": "fiber_100g",
    "sugars": "sugars_100g",
    "vitamin_a": "vitamin-a_100g",
    "vitamin_c": "vitamin-c_100g",
    "calcium": "calcium_100g",
    "iron": "iron_100g",
    "potassium": "potassium_100g",
}

INGREDIENT_SEPARATORS = re.compile(r"[,.;:]")
ALLERGEN_SEPARATORS = re.compile(r"[,;]")
NON_NUMERIC = re.compile(r"[^\d.\-]")


class OpenFoodFactsProduct(BaseModel):
    """
    Partial view of an Open Food Facts product.

    Every field is optional; unknown keys are kept in model_extra so the
    localised ingredients_text_<lang> variants remain reachable.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    code: Optional[str] = None
    internal_id: Optional[str] = Field(None, alias="_id")
    product_name: Optional[str] = None
    generic_name: Optional[str] = None
    brands: Optional[str] = None
    ingredients_text: Optional[str] = None
    allergens: Optional[str] = None
    image_url: Optional[str] = None
    nutriments: Optional[Dict[str, Any]] = None

    @field_validator("code", "internal_id", mode="before")
    @classmethod
    def coerce_identifier(cls, value: Any) -> Optional[str]:
        # OFF occasionally returns numeric codes
        if value is None:
            return None
        return str(value)

    @field_validator(
        "product_name", "generic_name", "brands", "ingredients_text", "allergens", "image_url",
        mode="before",
    )
    @classmethod
    def drop_non_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("nutriments", mode="before")
    @classmethod
    def drop_non_mapping(cls, value: Any) -> Optional[Dict[str, Any]]:
        return value if isinstance(value, dict) else None


def _dedupe(items: Iterable[str], limit: int) -> List[str]:
    """Drop empties and duplicates keeping first-seen order; stop at limit."""
    result: List[str] = []
    seen: Set[str] = set()
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(item)
        if len(result) >= limit:
            break
    return result


def parse_ingredients(ingredients_text: Optional[str]) -> List[str]:
    """Split raw ingredients text into a clean, ordered list (max 50)."""
    if not ingredients_text:
        return []
    pieces = INGREDIENT_SEPARATORS.split(ingredients_text.lower())
    return _dedupe((piece.strip() for piece in pieces), MAX_INGREDIENTS)


def parse_allergens(allergens_text: Optional[str]) -> List[str]:
    """Split the allergens field into a clean, ordered list (max 10)."""
    if not allergens_text:
        return []
    cleaned = allergens_text.lower().replace("<", "").replace(">", "")
    pieces = ALLERGEN_SEPARATORS.split(cleaned)
    return _dedupe((piece.strip() for piece in pieces), MAX_ALLERGENS)


def parse_number(value: Any) -> Optional[float]:
    """
    Extract a number from a nutriment value such as "12.5 g" or 12.5.
    Returns None when nothing parsable remains.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    stripped = NON_NUMERIC.sub("", str(value))
    try:
        return float(stripped)
    except ValueError:
        return None


def parse_nutrition(nutriments: Optional[Dict[str, Any]]) -> Optional[NutritionInfo]:
    """Map OFF nutriments onto NutritionInfo; missing values stay None."""
    if not nutriments:
        return None

    values = {
        field: parse_number(nutriments.get(key))
        for field, key in NUTRIENT_KEYS.items()
    }
    return NutritionInfo(serving_size=DEFAULT_SERVING_SIZE, **values)


def extract_barcode(product: OpenFoodFactsProduct) -> str:
    """
    Resolve the product barcode.
    Prefers "code", falls back to the trailing segment of "_id" ("xx#<barcode>"
    or the bare barcode).
    """
    if product.code and product.code.strip():
        return product.code.strip()
    if product.internal_id:
        tail = product.internal_id.split("#")[-1].strip()
        if tail:
            return tail
    raise AdapterDataError("Product missing barcode - cannot import")


def _raw_barcode(raw: Any) -> Optional[str]:
    """Best-effort barcode of a raw hit, for error reporting only."""
    if not isinstance(raw, dict):
        return None
    for key in ("code", "_id"):
        value = raw.get(key)
        if value not in (None, ""):
            return str(value).split("#")[-1].strip() or None
    return None


def extract_description(product: OpenFoodFactsProduct) -> str:
    if product.generic_name:
        return product.generic_name
    if product.ingredients_text:
        return product.ingredients_text

    localized = [
        value for key, value in (product.model_extra or {}).items()
        if key.startswith("ingredients_text") and isinstance(value, str) and value
    ]
    return " ".join(localized)


def normalize_product(raw: Dict[str, Any]) -> NormalizedProduct:
    """
    Transform an Open Food Facts product payload into a NormalizedProduct.

    health_score and warnings are left empty for the pipeline.

    Raises:
        AdapterDataError: payload has no usable barcode or invalid fields
    """
    try:
        product = OpenFoodFactsProduct.model_validate(raw)
        return NormalizedProduct(
            barcode=extract_barcode(product),
            name=product.product_name or UNKNOWN_PRODUCT_NAME,
            brand=product.brands or "",
            description=extract_description(product),
            ingredients=parse_ingredients(product.ingredients_text),
            allergens=parse_allergens(product.allergens),
            nutrition_info=parse_nutrition(product.nutriments),
            image_url=product.image_url or "",
            source=SOURCE_OPENFOODFACTS,
            external_id=product.internal_id or "",
        )
    except ValidationError as e:
        raise AdapterDataError(
            f"Invalid Open Food Facts product payload: {e.error_count()} field error(s)"
        ) from e


class OpenFoodFactsClient:
    """
    HTTP client for Open Food Facts API integration.

    Open Food Facts is a public database - no API key required, but an
    identifying User-Agent is expected on every request.

    Methods:
        fetch_by_barcode: Look up one product by barcode
        search_products: Free-text search, one page at a time

    An httpx.AsyncClient can be injected (tests, connection reuse);
    otherwise a short-lived client with the configured timeout is opened per call.
    """

    SOURCE = SOURCE_OPENFOODFACTS

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._http_client = http_client

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"[OpenFoodFacts] GET {url}")
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, params=params, headers=self.headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=self.headers)
        except httpx.TimeoutException as e:
            logger.error(f"[OpenFoodFacts] Timeout calling {url}: {e}")
            raise AdapterTransportError("Open Food Facts request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"[OpenFoodFacts] Transport error calling {url}: {e}")
            raise AdapterTransportError(f"Failed to reach Open Food Facts: {e}") from e

        logger.info(f"[OpenFoodFacts] {response.status_code} {url}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise AdapterDataError("Open Food Facts returned invalid JSON") from e
        if not isinstance(data, dict):
            raise AdapterDataError("Open Food Facts returned an unexpected payload")
        return data

    async def fetch_by_barcode(self, barcode: str) -> Optional[NormalizedProduct]:
        """
        Look up a product by barcode.

        Args:
            barcode: EAN-13, UPC-A, ... as a digit string

        Returns:
            NormalizedProduct, or None when OFF does not know the barcode

        Raises:
            AdapterTransportError: network failure, timeout or non-2xx (except 404)
            AdapterDataError: payload unusable (e.g. no derivable barcode)
        """
        response = await self._get(f"/api/v0/product/{barcode}.json")

        if response.status_code == 404:
            logger.info(f"[OpenFoodFacts] Barcode {barcode} not found (HTTP 404)")
            return None

        if not response.is_success:
            logger.error(f"[OpenFoodFacts] Lookup failed for {barcode}: HTTP {response.status_code}")
            raise AdapterTransportError(
                f"Open Food Facts API error: {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
                context={"barcode": barcode},
            )

        data = self._json(response)
        if data.get("status") == 0 or not isinstance(data.get("product"), dict):
            logger.info(f"[OpenFoodFacts] Barcode {barcode} not found ({data.get('status_verbose', 'status 0')})")
            return None

        return normalize_product(data["product"])

    async def search_products(self, term: str, page: int = 1, page_size: int = 20) -> SearchResult:
        """
        Search products by free text.

        Returns:
            SearchResult with normalized products; empty when nothing matches.
            Hits that cannot be normalized are listed in rejected instead.

        Raises:
            AdapterTransportError: network failure, timeout or non-2xx
            AdapterDataError: the response body is not a JSON object
        """
        response = await self._get(
            "/cgi/search.pl",
            params={
                "search_terms": term,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page": page,
                "page_size": page_size,
                "sort_by": "unique_scans_n",
                "fields": SEARCH_FIELDS,
            },
        )

        if not response.is_success:
            logger.error(f"[OpenFoodFacts] Search failed for '{term}': HTTP {response.status_code}")
            raise AdapterTransportError(
                f"Failed to search products from Open Food Facts: {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
                context={"term": term},
            )

        data = self._json(response)
        raw_products = data.get("products")
        if not raw_products:
            return SearchResult(products=[], count=0, page_size=0)

        products = []
        rejected = []
        for raw in raw_products:
            try:
                if not isinstance(raw, dict):
                    raise AdapterDataError("Search hit is not an object")
                products.append(normalize_product(raw))
            except AdapterDataError as e:
                barcode = _raw_barcode(raw)
                logger.warning(f"[OpenFoodFacts] Skipping search hit {barcode or '?'} for '{term}': {e}")
                rejected.append(RejectedSearchHit(barcode=barcode, reason=str(e)))

        return SearchResult(
            products=products,
            rejected=rejected,
            count=int(data.get("count") or len(products)),
            page_size=int(data.get("page_size") or page_size),
        )
