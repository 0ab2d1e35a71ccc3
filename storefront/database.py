# storefront/database.py
import itertools
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Protocol

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .errors import StorageError
from .models import Base, Product, ProductData, ProductRow

logger = logging.getLogger(__name__)

# This file holds the product backings. Both keep one collection keyed by id.


class ProductRepository(Protocol):
    def create_tables(self) -> None: ...

    def list(self, category: Optional[str] = None) -> List[Product]: ...

    def get(self, product_id: int) -> Optional[Product]: ...

    def categories(self) -> List[str]: ...

    def insert(self, data: ProductData, image_url: Optional[str]) -> Product: ...

    def update(self, product_id: int, data: ProductData, image_url: Optional[str]) -> Optional[Product]: ...

    def delete(self, product_id: int) -> bool: ...


# ---------------------------
# In-memory backing
# ---------------------------
class InMemoryProductRepository:
    def __init__(self):
        self._products: Dict[int, Product] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_tables(self) -> None:
        pass

    def list(self, category: Optional[str] = None) -> List[Product]:
        with self._lock:
            out = [p for p in self._products.values() if category is None or p.category == category]
        return sorted(out, key=lambda p: (p.created_at, p.id), reverse=True)

    def get(self, product_id: int) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def categories(self) -> List[str]:
        with self._lock:
            return sorted({p.category for p in self._products.values() if p.category is not None})

    def insert(self, data: ProductData, image_url: Optional[str]) -> Product:
        with self._lock:
            pid = next(self._ids)
            product = Product(
                id=pid,
                image_url=image_url,
                created_at=datetime.now(timezone.utc),
                **data.model_dump(),
            )
            self._products[pid] = product
            return product

    def update(self, product_id: int, data: ProductData, image_url: Optional[str]) -> Optional[Product]:
        with self._lock:
            current = self._products.get(product_id)
            if current is None:
                return None
            updated = current.model_copy(update={**data.model_dump(), "image_url": image_url})
            self._products[product_id] = updated
            return updated

    def delete(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None


# ---------------------------
# SQLAlchemy backing
# ---------------------------
def make_engine(database_url: str):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, pool_recycle=300)


class SqlProductRepository:
    def __init__(self, database_url: str):
        self.engine = make_engine(database_url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("database error: %s", e)
            raise StorageError(f"database error: {e.__class__.__name__}") from e
        finally:
            db.close()

    def create_tables(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"could not create tables: {e.__class__.__name__}") from e

    def list(self, category: Optional[str] = None) -> List[Product]:
        stmt = select(ProductRow)
        if category is not None:
            stmt = stmt.where(ProductRow.category == category)
        stmt = stmt.order_by(ProductRow.created_at.desc(), ProductRow.id.desc())
        with self._session() as db:
            return [Product.from_row(row) for row in db.scalars(stmt)]

    def get(self, product_id: int) -> Optional[Product]:
        with self._session() as db:
            row = db.get(ProductRow, product_id)
            return Product.from_row(row) if row else None

    def categories(self) -> List[str]:
        stmt = (
            select(ProductRow.category)
            .where(ProductRow.category.is_not(None))
            .distinct()
            .order_by(ProductRow.category)
        )
        with self._session() as db:
            return list(db.scalars(stmt))

    def insert(self, data: ProductData, image_url: Optional[str]) -> Product:
        with self._session() as db:
            row = ProductRow(
                name=data.name,
                description=data.description,
                price=data.price_cents,
                image_url=image_url,
                category=data.category,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return Product.from_row(row)

    def update(self, product_id: int, data: ProductData, image_url: Optional[str]) -> Optional[Product]:
        with self._session() as db:
            row = db.get(ProductRow, product_id)
            if row is None:
                return None
            row.name = data.name
            row.description = data.description
            row.price = data.price_cents
            row.image_url = image_url
            row.category = data.category
            db.commit()
            db.refresh(row)
            return Product.from_row(row)

    def delete(self, product_id: int) -> bool:
        with self._session() as db:
            row = db.get(ProductRow, product_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True


def build_repository(settings: Settings) -> ProductRepository:
    if settings.uses_memory_store:
        return InMemoryProductRepository()
    return SqlProductRepository(settings.database_url)
