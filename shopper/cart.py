# shopper/cart.py
import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import BaseModel, Field

from storefront.pricing import as_decimal, to_decimal, to_minor_units

logger = logging.getLogger(__name__)

CART_KEY = "storefront_cart"
DEFAULT_CART_FILE = os.getenv("STOREFRONT_CART_FILE", os.path.join("~", ".storefront", "cart.json"))


class CartItem(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    image_url: Optional[str] = None
    quantity: int = Field(1, ge=1)

    @property
    def subtotal(self) -> Decimal:
        return Decimal(to_decimal(to_minor_units(self.unit_price) * self.quantity))


# ---------------------------
# Persistence ports
# ---------------------------
class CartStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryCartStorage:
    def __init__(self):
        self.values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FileCartStorage:
    """Key/value strings in a small JSON file, like a browser's local storage."""

    def __init__(self, path: str = DEFAULT_CART_FILE):
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except ValueError:
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        tmp.replace(self.path)


# ---------------------------
# Cart
# ---------------------------
class Cart:
    """Client-held cart. Every mutation is written to storage before returning."""

    def __init__(self, storage: CartStorage, key: str = CART_KEY):
        self.storage = storage
        self.key = key
        self.last_save_error: Optional[str] = None
        self.items: List[CartItem] = self._restore()

    def _restore(self) -> List[CartItem]:
        try:
            raw = self.storage.get(self.key)
            if not raw:
                return []
            rows = json.loads(raw)
            loaded = [CartItem.model_validate(row) for row in rows]
        except (OSError, ValueError, TypeError) as e:
            logger.warning("discarding unreadable cart state: %s", e)
            return []

        # merge duplicates left behind by older writers
        merged: Dict[int, CartItem] = {}
        for item in loaded:
            if item.product_id in merged:
                merged[item.product_id].quantity += item.quantity
            else:
                merged[item.product_id] = item
        return list(merged.values())

    def _save(self):
        payload = json.dumps([item.model_dump(mode="json") for item in self.items])
        try:
            self.storage.set(self.key, payload)
            self.last_save_error = None
        except (OSError, ValueError, TypeError) as e:
            self.last_save_error = str(e)
            logger.warning("could not save cart: %s", e)

    def _find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add(self, product: Mapping[str, Any]) -> CartItem:
        item = self._find(product["id"])
        if item is not None:
            item.quantity += 1
        else:
            # price and image are a snapshot taken now
            item = CartItem(
                product_id=product["id"],
                name=product["name"],
                unit_price=as_decimal(product["price"]),
                image_url=product.get("image_url"),
            )
            self.items.append(item)
        self._save()
        return item

    def update_quantity(self, product_id: int, delta: int):
        item = self._find(product_id)
        if item is None:
            return
        new_qty = item.quantity + delta
        if new_qty <= 0:
            self.items.remove(item)
        else:
            item.quantity = new_qty
        self._save()

    def remove(self, product_id: int):
        item = self._find(product_id)
        if item is None:
            return
        self.items.remove(item)
        self._save()

    def clear(self):
        self.items = []
        self._save()

    def total(self) -> Decimal:
        cents = sum(to_minor_units(item.unit_price) * item.quantity for item in self.items)
        return Decimal(to_decimal(cents))

    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def __iter__(self):
        return iter(list(self.items))

    def __len__(self) -> int:
        return len(self.items)
