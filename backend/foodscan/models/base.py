"""
Base Model Class
Provides common fields and functionality for all database models.

All application models should inherit from BaseModel instead of Base directly.
This ensures consistent ID format (UUID) and automatic timestamp tracking.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, Uuid, func

from foodscan.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """
    Abstract base model with common fields for all tables.

    Provides:
    - UUID primary key, assigned by the store on insert
    - created_at timestamp (set once on insert)
    - updated_at timestamp (refreshed on every modification)

    Example:
        class Product(BaseModel):
            __tablename__ = "products"
            barcode = Column(String, unique=True)
            # id, created_at, updated_at are inherited automatically
    """

    # No table is created for BaseModel itself
    __abstract__ = True

    # Generic Uuid maps to native UUID on PostgreSQL and CHAR(32) elsewhere
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )

    # Python-side defaults keep microsecond ordering on every backend;
    # server_default covers rows inserted outside the ORM.
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id})>"
