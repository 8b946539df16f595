"""
SQLAlchemy Declarative Base
Defines the base class for all SQLAlchemy models.

All database models should inherit from the Base class defined here.
This provides ORM functionality and table creation capabilities.
"""

from sqlalchemy.orm import declarative_base

# Declarative base class for all models
# SQLAlchemy uses this to track all models and create their tables.
#
# Usage:
#     from foodscan.db.base import Base
#
#     class Product(Base):
#         __tablename__ = "products"
#         id = Column(Uuid, primary_key=True)
#         ...
Base = declarative_base()
