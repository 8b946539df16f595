"""
Database Models Module
Contains SQLAlchemy ORM models for all database tables.

All models must be imported here to be registered with SQLAlchemy
and created during Base.metadata.create_all().
"""

from foodscan.db.base import Base
from foodscan.models.base import BaseModel
from foodscan.models.product import Product

__all__ = [
    "Base",
    "BaseModel",
    "Product",
]
