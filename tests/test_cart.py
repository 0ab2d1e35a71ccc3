# tests/test_cart.py
import json
from decimal import Decimal

from shopper.cart import CART_KEY, Cart, FileCartStorage, MemoryCartStorage

LIPSTICK = {"id": 1, "name": "Lipstick", "price": "5.00", "image_url": "https://img/lip.png"}
POLISH = {"id": 2, "name": "Nail polish", "price": "3.50", "image_url": None}


class BrokenStorage(MemoryCartStorage):
    def set(self, key, value):
        raise OSError("disk full")


def test_adding_same_product_twice_merges():
    cart = Cart(MemoryCartStorage())
    cart.add(LIPSTICK)
    cart.add(LIPSTICK)
    assert len(cart) == 1
    assert cart.items[0].quantity == 2
    assert cart.count() == 2
    assert cart.total() == Decimal("10.00")


def test_price_is_a_snapshot():
    cart = Cart(MemoryCartStorage())
    product = dict(LIPSTICK)
    cart.add(product)
    product["price"] = "9.00"
    cart.add(product)
    assert cart.items[0].unit_price == Decimal("5.00")
    assert cart.total() == Decimal("10.00")


def test_reducing_quantity_to_zero_removes_item():
    cart = Cart(MemoryCartStorage())
    cart.add(LIPSTICK)
    cart.add(LIPSTICK)
    cart.add(POLISH)

    cart.update_quantity(1, -2)
    assert [i.product_id for i in cart] == [2]
    assert cart.total() == Decimal("3.50")

    cart.update_quantity(2, -5)
    assert cart.is_empty()
    assert cart.total() == Decimal("0.00")


def test_update_quantity_increments_and_ignores_unknown():
    cart = Cart(MemoryCartStorage())
    cart.add(POLISH)
    cart.update_quantity(2, 3)
    cart.update_quantity(99, 1)
    assert cart.count() == 4
    assert cart.total() == Decimal("14.00")


def test_remove_and_clear():
    cart = Cart(MemoryCartStorage())
    cart.add(LIPSTICK)
    cart.add(POLISH)
    cart.remove(99)
    cart.remove(1)
    assert [i.product_id for i in cart] == [2]
    cart.clear()
    assert cart.count() == 0


def test_state_survives_restart():
    storage = MemoryCartStorage()
    cart = Cart(storage)
    cart.add(LIPSTICK)
    cart.add(POLISH)
    cart.update_quantity(2, 1)

    restored = Cart(storage)
    assert [(i.product_id, i.quantity) for i in restored] == [(1, 1), (2, 2)]
    assert restored.items[0].image_url == "https://img/lip.png"
    assert restored.total() == Decimal("12.00")


def test_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "cart.json"
    cart = Cart(FileCartStorage(str(path)))
    cart.add(LIPSTICK)

    stored = json.loads(json.loads(path.read_text())[CART_KEY])
    assert stored[0]["product_id"] == 1
    assert stored[0]["unit_price"] == "5.00"
    assert Cart(FileCartStorage(str(path))).count() == 1


def test_corrupt_state_restores_empty(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text("{not json")
    cart = Cart(FileCartStorage(str(path)))
    assert cart.is_empty()

    cart.add(POLISH)
    assert Cart(FileCartStorage(str(path))).count() == 1


def test_duplicate_entries_are_merged_on_restore():
    storage = MemoryCartStorage()
    row = {"product_id": 1, "name": "Lipstick", "unit_price": "5.00", "quantity": 1}
    storage.set(CART_KEY, json.dumps([row, row]))
    cart = Cart(storage)
    assert len(cart) == 1
    assert cart.count() == 2


def test_failed_save_is_a_warning_not_a_crash():
    cart = Cart(BrokenStorage())
    cart.add(LIPSTICK)
    assert cart.count() == 1
    assert cart.last_save_error == "disk full"
