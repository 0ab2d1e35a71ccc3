# cli.py
import sys
import webbrowser
from datetime import datetime
from typing import List, Dict, Any, Optional

import requests
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from shopper.cart import Cart, FileCartStorage
from shopper.client import StoreClient
from shopper.order import Checkout, Customer, EmptyCartError
from storefront.errors import ValidationError
from storefront.pricing import format_money, to_minor_units

console = Console()
# one local file holds both the cart and the saved admin token
local_storage = FileCartStorage()
c = StoreClient(token_storage=local_storage)
cart = Cart(local_storage)

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
category_cache: List[str] = []
messaging_destination = "584121410816"
shop_name = "KEROVIC"

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="💅 Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=15)
    table.add_column("Description", width=36)

    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            format_money(p.get("price", 0)),
            p.get("category") or "-",
            p.get("description") or "",
        )
    console.print(table)


def show_cart():
    title = Text()
    title.append("🛒 Cart", style="bold")
    title.append(f" - {cart.count()} items", style="bold cyan")
    title.append(f" - Total: {format_money(cart.total())}", style="bold green")

    if cart.is_empty():
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=12)

    for item in cart:
        table.add_row(
            str(item.product_id),
            item.name,
            str(item.quantity),
            format_money(item.unit_price),
            format_money(item.subtotal),
        )
    console.print(Panel(table, title=title, border_style="blue"))
    if cart.last_save_error:
        console.print(f"[yellow]Warning: cart could not be saved ({cart.last_save_error})[/yellow]")


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_text(e: Exception) -> str:
    if isinstance(e, requests.HTTPError) and e.response is not None:
        try:
            return f"HTTP {e.response.status_code}: {e.response.json().get('detail')}"
        except ValueError:
            return f"HTTP {e.response.status_code}: {e.response.text}"
    return str(e)


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns None on failure after reporting it in the status panel.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except (requests.RequestException, ValidationError, OSError) as e:
        status_message = f"Error: {_error_text(e)}"
        console.print(show_status(status_message, False))
        return None


def load_catalog(category: Optional[str] = None) -> List[Dict[str, Any]]:
    global product_cache
    products = try_api(c.list_products, category)
    if products is None:
        console.print("[yellow]Catalog unavailable, showing nothing for now.[/yellow]")
        return []
    product_cache = products
    return products


def load_categories() -> List[str]:
    global category_cache
    categories = try_api(c.list_categories)
    category_cache = categories or []
    return category_cache


def load_config():
    global messaging_destination
    config = try_api(c.get_config)
    if config:
        messaging_destination = config.get("messagingDestination") or messaging_destination


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    if not product_cache:
        load_catalog()
    ids = [str(p.get("id", "")) for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_category_completer():
    if not category_cache:
        load_categories()
    return WordCompleter(category_cache, ignore_case=True)


def find_cached_product(product_id: int) -> Optional[Dict[str, Any]]:
    for p in product_cache:
        if p.get("id") == product_id:
            return p
    return try_api(c.get_product, product_id)


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        f"🛍️ {shop_name}",
        "[bold blue]Catalog & WhatsApp checkout[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_price(message: str, default: str = "10.00") -> str:
    while True:
        raw = Prompt.ask(message, default=default)
        try:
            if to_minor_units(raw) >= 0:
                return raw
        except ValidationError:
            pass
        console.print("[red]Please enter a valid, non-negative price.[/red]")


def ask_product_id() -> int:
    raw = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
    try:
        return int(raw)
    except ValueError:
        return -1


def ask_product_fields(current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    current = current or {}
    name = prompt_with_autocomplete("Product name", default=current.get("name", ""))
    price = ask_price("💰 Price", default=str(current.get("price", "10.00")))
    description = prompt_with_autocomplete("Description", default=current.get("description") or "")
    category = prompt_with_autocomplete("🏷️ Category", completer=get_category_completer(),
                                        default=current.get("category") or "")
    image_path = prompt_with_autocomplete("Image file (blank for none)").strip() or None
    return {"name": name, "price": price, "description": description,
            "category": category, "image_path": image_path}


# ---------------------------
# Checkout
# ---------------------------
def checkout():
    if cart.is_empty():
        console.print(show_status("The cart is empty", False))
        return

    show_cart()
    customer = Customer(
        name=Prompt.ask("Your name"),
        address=Prompt.ask("Delivery address"),
        phone=Prompt.ask("Phone (optional)", default="") or None,
    )
    flow = Checkout(cart, messaging_destination, webbrowser.open, shop_name=shop_name)
    try:
        result = flow.submit(customer)
    except (EmptyCartError, ValidationError) as e:
        console.print(show_status(f"Error: {e}", False))
        return
    except webbrowser.Error as e:
        console.print(show_status(f"Could not open WhatsApp: {e}", False))
        return

    console.print(Panel(result.message, title="📨 Order sent", border_style="green"))
    console.print(f"[dim]{result.url}[/dim]")
    console.print(show_status("Order sent! We will contact you soon.", True))


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())

    load_config()
    load_catalog()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "8", "✅ Checkout"),
            ("2", "🏷️ Filter by category", "9", "🔑 Admin login"),
            ("3", "ℹ️ Product details", "10", "➕ Add product"),
            ("4", "🛒 Add to cart", "11", "✏️ Edit product"),
            ("5", "🧺 View cart", "12", "🗑️ Delete product"),
            ("6", "➕➖ Change quantity", "13", "🚪 Admin logout"),
            ("7", "❌ Remove from cart", "q", "👋 Quit"),
        ]

        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 14)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            show_products(load_catalog())

        elif choice == "2":
            category = prompt_with_autocomplete("Category", completer=get_category_completer()).strip()
            show_products(load_catalog(category or None))

        elif choice == "3":
            resp = try_api(c.get_product, ask_product_id(), success_msg="Product loaded")
            if resp:
                show_products([resp])

        elif choice == "4":
            pid = ask_product_id()
            product = find_cached_product(pid)
            if product:
                item = cart.add(product)
                status_message = f"{item.name} added to cart"
                show_cart()

        elif choice == "5":
            show_cart()

        elif choice == "6":
            pid = ask_product_id()
            delta = IntPrompt.ask("Change quantity by", default=1)
            cart.update_quantity(pid, delta)
            show_cart()

        elif choice == "7":
            pid = ask_product_id()
            cart.remove(pid)
            show_cart()

        elif choice == "8":
            checkout()

        elif choice == "9":
            password = Prompt.ask("Admin password", password=True)
            try_api(c.login, password, success_msg="Welcome to the admin panel")

        elif choice == "10":
            fields = ask_product_fields()
            resp = try_api(c.create_product, success_msg=f"Product '{fields['name']}' created", **fields)
            if resp:
                show_products([resp])
                load_catalog()
                load_categories()

        elif choice == "11":
            pid = ask_product_id()
            current = try_api(c.get_product, pid)
            if current:
                fields = ask_product_fields(current)
                resp = try_api(c.update_product, pid, success_msg=f"Product {pid} updated", **fields)
                if resp:
                    show_products([resp])
                    load_catalog()
                    load_categories()

        elif choice == "12":
            pid = ask_product_id()
            if Confirm.ask("[red]Delete this product?[/red]"):
                resp = try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted")
                if resp:
                    show_products([resp["product"]])
                    load_catalog()
                    load_categories()

        elif choice == "13":
            c.logout()
            status_message = "Logged out of the admin panel"

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thanks for shopping! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
