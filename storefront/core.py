# storefront/core.py
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel

from .errors import ValidationError
from .models import Product, ProductData
from .pricing import to_decimal, to_minor_units

# largest value a signed 64-bit INTEGER column holds
MAX_PRICE_CENTS = 2 ** 63 - 1

# ---------------------------
# Pydantic schemas
# ---------------------------
class ProductIn(BaseModel):
    name: str
    description: Optional[str] = None
    price: Union[str, float, int]
    category: Optional[str] = None

    def to_data(self) -> ProductData:
        name = self.name.strip()
        if not name:
            raise ValidationError("name is required")
        price_cents = to_minor_units(self.price)
        if price_cents < 0:
            raise ValidationError("price must not be negative")
        if price_cents > MAX_PRICE_CENTS:
            raise ValidationError("price is too large")
        return ProductData(
            name=name,
            description=_blank_to_none(self.description),
            price_cents=price_cents,
            category=_blank_to_none(self.category),
        )


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: str
    image_url: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime


class DeletedOut(BaseModel):
    message: str
    product: ProductOut


class LoginIn(BaseModel):
    password: str


class LoginOut(BaseModel):
    token: str


class ConfigOut(BaseModel):
    messagingDestination: str


# ---------------------------
# Helpers
# ---------------------------
def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def to_public(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        price=to_decimal(product.price_cents),
        image_url=product.image_url,
        category=product.category,
        created_at=product.created_at,
    )
