# tests/test_client.py
import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from shopper.cart import Cart, MemoryCartStorage
from shopper.client import TOKEN_KEY, StoreClient
from shopper.order import Checkout, Customer


class ASGIAdapter(BaseAdapter):
    """Routes requests.Session traffic into a FastAPI TestClient."""

    def __init__(self, test_client):
        super().__init__()
        self.test_client = test_client

    def send(self, request, **kwargs):
        r = self.test_client.request(
            request.method, request.url, content=request.body, headers=dict(request.headers)
        )
        resp = requests.Response()
        resp.status_code = r.status_code
        resp._content = r.content
        resp.headers = CaseInsensitiveDict(r.headers)
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass


@pytest.fixture
def store_client(client):
    sc = StoreClient(base_url="http://testserver")
    sc.session.mount("http://testserver", ASGIAdapter(client))
    return sc


def test_admin_flow_through_sdk(store_client, tmp_path):
    with pytest.raises(requests.HTTPError):
        store_client.create_product("Lipstick", "5.00")

    assert store_client.login("secret") == "secret"

    image = tmp_path / "lip.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n")
    created = store_client.create_product("Lipstick", "5.00", "Matte", "makeup", image_path=str(image))
    assert created["image_url"].endswith("/lip.png")

    updated = store_client.update_product(created["id"], "Lipstick", 6, category="makeup")
    assert updated["price"] == "6.00"
    assert updated["image_url"] == created["image_url"]

    assert store_client.list_categories() == ["makeup"]
    assert store_client.list_products("nails") == []
    assert store_client.get_product(created["id"])["name"] == "Lipstick"

    deleted = store_client.delete_product(created["id"])
    assert deleted["product"]["id"] == created["id"]
    with pytest.raises(requests.HTTPError):
        store_client.get_product(created["id"])


def test_browse_and_checkout(store_client):
    store_client.login("secret")
    product = store_client.create_product("Lipstick", "5.00")

    cart = Cart(MemoryCartStorage())
    cart.add(store_client.get_product(product["id"]))
    cart.add(store_client.list_products()[0])

    destination = store_client.get_config()["messagingDestination"]
    opened = []
    result = Checkout(cart, destination, opened.append).submit(Customer(name="Ana", address="Calle 1"))

    assert opened[0].startswith("https://wa.me/584121410816?text=")
    assert result.message.endswith("*TOTAL: $10.00*")
    assert cart.is_empty()


def test_admin_token_is_saved_and_cleared(client):
    storage = MemoryCartStorage()
    sc = StoreClient(base_url="http://testserver", token_storage=storage)
    sc.session.mount("http://testserver", ASGIAdapter(client))
    assert not sc.is_admin

    sc.login("secret")
    assert storage.get(TOKEN_KEY) == "secret"

    # a new session picks the token up without logging in again
    restored = StoreClient(base_url="http://testserver", token_storage=storage)
    restored.session.mount("http://testserver", ASGIAdapter(client))
    assert restored.is_admin
    assert restored.create_product("Lipstick", "5.00")["price"] == "5.00"

    restored.logout()
    assert not restored.is_admin
    assert not storage.get(TOKEN_KEY)
    with pytest.raises(requests.HTTPError):
        restored.create_product("Polish", "3.50")
    assert StoreClient(base_url="http://testserver", token_storage=storage).is_admin is False
