"""
External Service Integrations

This package contains HTTP clients and adapters for external product sources:
- Open Food Facts (barcode lookup and free-text search)
"""

from foodscan.integrations.openfoodfacts import OpenFoodFactsClient, normalize_product

__all__ = [
    "OpenFoodFactsClient",
    "normalize_product",
]
