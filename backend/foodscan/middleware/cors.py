"""
CORS Middleware Configuration
Enables Cross-Origin Resource Sharing for the mobile and web clients.

Allowed origins come from settings.CORS_ORIGINS (comma-separated) so each
deployment can list its own Expo/web dev servers and production domains.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodscan.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # Allow cookies and auth headers
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers
    )
