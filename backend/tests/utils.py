"""
Shared test helpers: in-memory store, fake product source, payload builders.
"""

from typing import Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from foodscan.core.constants import SOURCE_OPENFOODFACTS
from foodscan.models import Base
from foodscan.schemas.product import NormalizedProduct, NutritionInfo, SearchResult


def make_session_factory():
    """Fresh in-memory SQLite database with all tables, usable across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_normalized(
    barcode: str = "012345678901",
    ingredients: Optional[List[str]] = None,
    nutrition_info: Optional[NutritionInfo] = None,
    external_id: Optional[str] = None,
    source: str = SOURCE_OPENFOODFACTS,
    name: str = "Test Product",
) -> NormalizedProduct:
    return NormalizedProduct(
        barcode=barcode,
        name=name,
        brand="Test Brand",
        description="A product used in tests",
        ingredients=ingredients if ingredients is not None else ["sugar", "salt"],
        allergens=[],
        nutrition_info=nutrition_info,
        image_url="",
        source=source,
        external_id=external_id if external_id is not None else barcode,
    )


def off_product(**overrides) -> Dict:
    """Open Food Facts product payload with sensible defaults."""
    product = {
        "code": "3017620422003",
        "_id": "3017620422003",
        "product_name": "Nutella",
        "generic_name": "Hazelnut spread with cocoa",
        "brands": "Ferrero",
        "ingredients_text": "Sugar, palm oil, hazelnuts 13%, skimmed milk powder 8.7%, fat-reduced cocoa 7.4%, emulsifier: lecithins (soya), vanillin",
        "allergens": "en:milk,en:nuts,en:soybeans",
        "image_url": "https://images.openfoodfacts.org/nutella.jpg",
        "nutriments": {
            "energy-kcal_100g": 539,
            "proteins_100g": 6.3,
            "carbohydrates_100g": 57.5,
            "fat_100g": 30.9,
            "saturated-fat_100g": 10.6,
            "sugars_100g": 56.3,
            "sodium_100g": 0.0428,
        },
    }
    product.update(overrides)
    return product


class FakeProductSource:
    """In-memory product source recording every call."""

    SOURCE = SOURCE_OPENFOODFACTS

    def __init__(
        self,
        products: Optional[Dict[str, NormalizedProduct]] = None,
        search_results: Optional[Dict[str, List[NormalizedProduct]]] = None,
        fetch_error: Optional[Exception] = None,
        search_errors: Optional[Dict[str, Exception]] = None,
    ):
        self.products = products or {}
        self.search_results = search_results or {}
        self.fetch_error = fetch_error
        self.search_errors = search_errors or {}
        self.fetch_calls: List[str] = []
        self.search_calls: List[tuple] = []

    async def fetch_by_barcode(self, barcode: str) -> Optional[NormalizedProduct]:
        self.fetch_calls.append(barcode)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.products.get(barcode)

    async def search_products(self, term: str, page: int = 1, page_size: int = 20) -> SearchResult:
        self.search_calls.append((term, page, page_size))
        if term in self.search_errors:
            raise self.search_errors[term]
        products = self.search_results.get(term, [])[:page_size]
        return SearchResult(products=products, count=len(products), page_size=page_size)
