"""
API v1 Main Router
Aggregates all v1 API endpoints into a single router.

Structure:
- /products/* - Barcode lookup, external fetch, bulk import, listing
"""

from fastapi import APIRouter

from foodscan.api.v1 import products


# Create main v1 router
# This router will be included in main.py with prefix /api/v1
api_router = APIRouter()


# Include product endpoints
# Endpoints: GET /products, GET /products/barcode/{barcode},
#            POST /products/barcode/{barcode}/fetch, POST /products/bulk-import
# No authentication (out of scope for this service)
api_router.include_router(products.router)
