"""
API v1 Module
Contains all version 1 API endpoints.
"""

# Expose routers for easy import
from foodscan.api.v1 import products

__all__ = ["products"]
