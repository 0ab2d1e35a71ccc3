# tests/test_pricing.py
from decimal import Decimal

import pytest

from storefront.errors import ValidationError
from storefront.pricing import as_decimal, format_money, to_decimal, to_minor_units


@pytest.mark.parametrize("price", ["0", "5", "5.5", "19.99", "0.01", "1234.56", "100.10"])
def test_price_survives_cents_conversion(price):
    assert Decimal(to_decimal(to_minor_units(price))) == Decimal(price)


def test_float_prices_do_not_drift():
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(0.1 + 0.2) == 30
    assert to_minor_units(1.005) == 101


def test_rounds_to_nearest_cent():
    assert to_minor_units("1.234") == 123
    assert to_minor_units("1.235") == 124
    assert to_minor_units("0.004") == 0


def test_to_decimal_always_has_two_digits():
    assert to_decimal(1050) == "10.50"
    assert to_decimal(0) == "0.00"
    assert to_decimal(7) == "0.07"


@pytest.mark.parametrize("bad", ["abc", "", "  ", "NaN", "inf", None, True])
def test_non_numeric_prices_are_rejected(bad):
    with pytest.raises(ValidationError):
        to_minor_units(bad)


def test_display_helpers():
    assert format_money("5") == "$5.00"
    assert format_money(Decimal("12.5")) == "$12.50"
    assert as_decimal("3.456") == Decimal("3.46")


@pytest.mark.parametrize("huge", ["1e30", "1e100", "9" * 40])
def test_prices_beyond_decimal_precision_are_rejected(huge):
    with pytest.raises(ValidationError):
        to_minor_units(huge)
