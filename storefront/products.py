# storefront/products.py
import logging
from typing import List, Optional

from .core import ProductIn, ProductOut, to_public
from .database import ProductRepository
from .errors import NotFound
from .uploads import ImageUpload, ImageUploader, validate_image

logger = logging.getLogger(__name__)


class ProductStore:
    """Product operations on top of a repository and an image host.

    Every read returns prices as two-digit decimal strings; the repository
    only ever sees integer cents.
    """

    def __init__(self, repository: ProductRepository, uploader: ImageUploader, max_image_bytes: int = 5 * 1024 * 1024):
        self.repository = repository
        self.uploader = uploader
        self.max_image_bytes = max_image_bytes

    def list(self, category: Optional[str] = None) -> List[ProductOut]:
        return [to_public(p) for p in self.repository.list(category)]

    def get(self, product_id: int) -> ProductOut:
        product = self.repository.get(product_id)
        if product is None:
            raise NotFound(f"product {product_id} not found")
        return to_public(product)

    def list_categories(self) -> List[str]:
        return self.repository.categories()

    async def _upload(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        validate_image(image, self.max_image_bytes)
        return await self.uploader.upload(image)

    async def create(self, fields: ProductIn, image: Optional[ImageUpload] = None) -> ProductOut:
        data = fields.to_data()
        image_url = await self._upload(image)
        product = self.repository.insert(data, image_url)
        logger.info("created product %s", product.id, extra={"extra_fields": {"product_id": product.id}})
        return to_public(product)

    async def update(self, product_id: int, fields: ProductIn, image: Optional[ImageUpload] = None) -> ProductOut:
        current = self.repository.get(product_id)
        if current is None:
            raise NotFound(f"product {product_id} not found")
        data = fields.to_data()

        image_url = current.image_url
        if image is not None:
            image_url = await self._upload(image)

        # full overwrite of the other fields, last writer wins
        product = self.repository.update(product_id, data, image_url)
        if product is None:
            raise NotFound(f"product {product_id} not found")
        logger.info("updated product %s", product_id, extra={"extra_fields": {"product_id": product_id}})
        return to_public(product)

    def delete(self, product_id: int) -> ProductOut:
        current = self.repository.get(product_id)
        if current is None:
            raise NotFound(f"product {product_id} not found")
        if not self.repository.delete(product_id):
            raise NotFound(f"product {product_id} not found")
        logger.info("deleted product %s", product_id, extra={"extra_fields": {"product_id": product_id}})
        return to_public(current)
