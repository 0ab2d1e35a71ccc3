# shopper/client.py
import logging
import mimetypes
import os
from typing import Any, Dict, List, Optional, Union

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("STOREFRONT_API_URL", "http://127.0.0.1:8085")
TOKEN_KEY = "storefront_admin_token"

Price = Union[str, float, int]


class StoreClient:
    def __init__(self, base_url: str = DEFAULT_API_URL, api_key: Optional[str] = None, timeout: int = 10,
                 token_storage=None):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        self.token_storage = token_storage
        if not api_key and token_storage is not None:
            api_key = self._stored_token()
        if api_key:
            self.set_token(api_key)

    def set_token(self, token: str):
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    @property
    def is_admin(self) -> bool:
        return "Authorization" in self.session.headers

    # token_storage is any get/set string store, e.g. shopper.cart.FileCartStorage
    def _stored_token(self) -> Optional[str]:
        try:
            return self.token_storage.get(TOKEN_KEY) or None
        except (OSError, ValueError) as e:
            logger.warning("could not read saved admin token: %s", e)
            return None

    def _store_token(self, token: str):
        if self.token_storage is None:
            return
        try:
            self.token_storage.set(TOKEN_KEY, token)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("could not save admin token: %s", e)

    # Public catalog
    def list_products(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {}
        if category:
            params["category"] = category
        r = self.session.get(f"{self.base_url}/api/products", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: int) -> Dict[str, Any]:
        r = self.session.get(f"{self.base_url}/api/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def list_categories(self) -> List[str]:
        r = self.session.get(f"{self.base_url}/api/products/meta/categories", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_config(self) -> Dict[str, Any]:
        r = self.session.get(f"{self.base_url}/api/config", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Admin
    def login(self, password: str) -> str:
        r = self.session.post(f"{self.base_url}/api/admin/login", json={"password": password}, timeout=self.timeout)
        r.raise_for_status()
        token = r.json()["token"]
        self.set_token(token)
        self._store_token(token)
        return token

    def logout(self):
        self.session.headers.pop("Authorization", None)
        self._store_token("")

    def _product_form(self, name: str, price: Price, description: Optional[str], category: Optional[str]):
        form = {"name": name, "price": str(price)}
        if description is not None:
            form["description"] = description
        if category is not None:
            form["category"] = category
        return form

    def _image_part(self, image_path: Optional[str]):
        if not image_path:
            return None
        content_type = mimetypes.guess_type(image_path)[0] or "application/octet-stream"
        with open(image_path, "rb") as fh:
            data = fh.read()
        return {"image": (os.path.basename(image_path), data, content_type)}

    def create_product(self, name: str, price: Price, description: Optional[str] = None,
                       category: Optional[str] = None, image_path: Optional[str] = None) -> Dict[str, Any]:
        r = self.session.post(
            f"{self.base_url}/api/products",
            data=self._product_form(name, price, description, category),
            files=self._image_part(image_path),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()

    def update_product(self, product_id: int, name: str, price: Price, description: Optional[str] = None,
                       category: Optional[str] = None, image_path: Optional[str] = None) -> Dict[str, Any]:
        r = self.session.put(
            f"{self.base_url}/api/products/{product_id}",
            data=self._product_form(name, price, description, category),
            files=self._image_part(image_path),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: int) -> Dict[str, Any]:
        r = self.session.delete(f"{self.base_url}/api/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()
