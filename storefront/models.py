# storefront/models.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    price = Column(Integer, nullable=False)  # cents
    image_url = Column(Text)
    category = Column(String, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Product(BaseModel):
    """A product as it is stored: price in integer cents."""

    id: int
    name: str
    description: Optional[str] = None
    price_cents: int
    image_url: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_row(cls, row: ProductRow) -> "Product":
        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=row.id,
            name=row.name,
            description=row.description,
            price_cents=row.price,
            image_url=row.image_url,
            category=row.category,
            created_at=created_at,
        )


class ProductData(BaseModel):
    """Writable product fields, already validated and converted to cents."""

    name: str
    description: Optional[str] = None
    price_cents: int
    category: Optional[str] = None
