#!/usr/bin/env python
import os

from shopper.cart import Cart, MemoryCartStorage
from shopper.client import StoreClient
from shopper.order import Checkout, Customer


def main():
    c = StoreClient()

    # -----------------------------
    # Admin: log in and add products
    # -----------------------------
    print("Logging in as admin...")
    c.login(os.getenv("ADMIN_PASSWORD", "admin"))

    print("\nCreating products...")
    lipstick = c.create_product("Lipstick", "5.00", "Matte red", "makeup")
    polish = c.create_product("Nail polish", "3.50", "Gel finish", "nails")
    print(lipstick)
    print(polish)

    # -----------------------------
    # Browse
    # -----------------------------
    print("\nCategories:", c.list_categories())
    print("\nMakeup only:", c.list_products("makeup"))

    # -----------------------------
    # Cart
    # -----------------------------
    cart = Cart(MemoryCartStorage())
    cart.add(lipstick)
    cart.add(lipstick)
    cart.add(polish)
    print(f"\nCart: {cart.count()} items, total ${cart.total()}")

    # -----------------------------
    # Checkout (print the link instead of opening it)
    # -----------------------------
    destination = c.get_config()["messagingDestination"]
    flow = Checkout(cart, destination, redirect=print)
    result = flow.submit(Customer(name="Ana", address="Calle 1"))
    print("\n" + result.message)
    print("\nCart after checkout:", cart.count(), "items")

    # -----------------------------
    # Clean up
    # -----------------------------
    print("\nDeleting demo products...")
    print(c.delete_product(lipstick["id"]))
    print(c.delete_product(polish["id"]))


if __name__ == "__main__":
    main()
