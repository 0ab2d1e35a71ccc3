# shopper/order.py
import enum
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Optional
from urllib.parse import quote

from pydantic import BaseModel

from storefront.errors import ValidationError
from storefront.pricing import format_money

from .cart import Cart, CartItem

logger = logging.getLogger(__name__)

SEPARATOR = "-----------------"
WHATSAPP_URL = "https://wa.me/{destination}?text={text}"


class Customer(BaseModel):
    name: str
    address: str
    phone: Optional[str] = None

    def validate_form(self) -> "Customer":
        name, address = self.name.strip(), self.address.strip()
        if not name:
            raise ValidationError("name is required")
        if not address:
            raise ValidationError("address is required")
        phone = (self.phone or "").strip() or None
        return Customer(name=name, address=address, phone=phone)


def format_order(items: Iterable[CartItem], customer: Customer, shop_name: str = "KEROVIC") -> str:
    items = list(items)
    lines = [f"*NEW ORDER - {shop_name.upper()}*", ""]
    lines.append(f"*Customer:* {customer.name}")
    lines.append(f"*Address:* {customer.address}")
    if customer.phone:
        lines.append(f"*Phone:* {customer.phone}")
    lines += ["", "*PRODUCTS:*", SEPARATOR]

    for item in items:
        lines.append(f"- {item.name}")
        lines.append(f"  Quantity: {item.quantity} x {format_money(item.unit_price)}")
        lines.append(f"  Subtotal: {format_money(item.subtotal)}")
        lines.append("")

    total = sum((item.subtotal for item in items), Decimal("0"))
    lines.append(SEPARATOR)
    lines.append(f"*TOTAL: {format_money(total)}*")
    return "\n".join(lines)


def build_checkout_url(destination: str, message: str) -> str:
    digits = re.sub(r"\D", "", destination)
    if not digits:
        raise ValidationError("messaging destination must contain a phone number")
    return WHATSAPP_URL.format(destination=digits, text=quote(message, safe=""))


# ---------------------------
# Checkout
# ---------------------------
class EmptyCartError(Exception):
    pass


class CheckoutState(enum.Enum):
    IDLE = "idle"
    FORMATTED = "formatted"
    CLEARED = "cleared"


@dataclass
class CheckoutResult:
    message: str
    url: str
    total: Decimal


class Checkout:
    """IDLE -> FORMATTED -> (redirect) -> CLEARED -> IDLE.

    ``redirect`` receives the checkout URL, e.g. ``webbrowser.open``. If it
    raises, the cart is left as it was.
    """

    def __init__(self, cart: Cart, destination: str, redirect: Callable[[str], object], shop_name: str = "KEROVIC"):
        self.cart = cart
        self.destination = destination
        self.redirect = redirect
        self.shop_name = shop_name
        self.state = CheckoutState.IDLE

    def submit(self, customer: Customer) -> CheckoutResult:
        if self.cart.is_empty():
            raise EmptyCartError("the cart is empty")
        customer = customer.validate_form()

        total = self.cart.total()
        count = self.cart.count()
        message = format_order(self.cart, customer, self.shop_name)
        url = build_checkout_url(self.destination, message)
        self.state = CheckoutState.FORMATTED

        try:
            self.redirect(url)
        except Exception:
            self.state = CheckoutState.IDLE
            raise

        self.cart.clear()
        self.state = CheckoutState.CLEARED
        logger.info("order handed off: %d items, total %s", count, total)
        self.state = CheckoutState.IDLE
        return CheckoutResult(message=message, url=url, total=total)
