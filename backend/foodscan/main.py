"""
Main FastAPI Application
Entry point for the FoodScan API.

This module creates and configures the FastAPI application instance,
sets up logging and middleware, and defines the health check endpoint.

Run with: uvicorn foodscan.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from foodscan.core.config import settings
from foodscan.core.logging import configure_logging
from foodscan.middleware.cors import setup_cors
from foodscan.middleware.error_handler import ErrorHandlerMiddleware
from foodscan.db.session import engine
from foodscan.models import Base
from foodscan.api.v1.router import api_router


configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    description="""
    FoodScan API - resolves scanned barcodes to food products.

    Features:
    - Local product store lookup by barcode
    - On-miss fetch from Open Food Facts
    - Health score (1-10) and ingredient warnings
    - Bulk population of the store from search terms
    """
)


# Setup CORS middleware
setup_cors(app)

# Setup error handler middleware
# Catches all unhandled exceptions and logs them
app.add_middleware(ErrorHandlerMiddleware)


@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.

    Creates the products table and its indexes if they don't exist yet.
    Safe to run multiple times.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("[Startup] Database tables created/verified")
    logger.info("[Startup] API documentation available at /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Dispose pooled database connections."""
    engine.dispose()
    logger.info("[Shutdown] Application shutdown complete")


@app.get(
    "/health",
    tags=["Health"],
    summary="Health Check",
    description="Check if the API is running"
)
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        JSON response with status, version and API name
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "version": "1.0.0",
            "api": settings.PROJECT_NAME
        }
    )


# Include API v1 router
# All v1 endpoints are prefixed with /api/v1
app.include_router(
    api_router,
    prefix=f"/api/{settings.API_VERSION}",
)

# Available endpoints:
# - GET  /api/v1/products - List stored products (newest first)
# - GET  /api/v1/products/barcode/{barcode} - Local lookup
# - POST /api/v1/products/barcode/{barcode}/fetch - Lookup, fetch and store
# - POST /api/v1/products/bulk-import - Import from search terms
