# storefront/pricing.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from .errors import ValidationError

# Prices travel as decimals and are persisted as integer cents.

Amount = Union[str, int, float, Decimal]

_CENT = Decimal("0.01")
_HUNDRED = Decimal(100)


def _parse(value: Amount) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("price must be a number")
    if isinstance(value, float):
        # str() keeps the shortest repr, so 19.99 stays 19.99
        value = str(value)
    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"price must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"price must be a finite number, got {value!r}")
    return amount


def to_minor_units(value: Amount) -> int:
    """Parse a decimal amount and return it as a whole number of cents."""
    try:
        cents = (_parse(value) * _HUNDRED).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"price out of range: {value!r}")
    return int(cents)


def to_decimal(minor_units: int) -> str:
    return str((Decimal(int(minor_units)) / _HUNDRED).quantize(_CENT))


def as_decimal(value: Amount) -> Decimal:
    """Normalise any amount to a two-digit Decimal via cents."""
    return Decimal(to_decimal(to_minor_units(value)))


def format_money(value: Amount) -> str:
    return f"${to_decimal(to_minor_units(value))}"
