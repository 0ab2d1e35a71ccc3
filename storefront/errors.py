# storefront/errors.py
from typing import Optional


class StoreError(Exception):
    """Base class for every error the product store reports to its callers."""

    status_code = 500
    default_message = "store error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(StoreError):
    status_code = 404
    default_message = "product not found"


class ValidationError(StoreError):
    status_code = 400
    default_message = "invalid input"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "not authorized"


class UpstreamError(StoreError):
    """The image host failed; the product mutation must not be applied."""

    status_code = 502
    default_message = "image upload failed"


class StorageError(StoreError):
    status_code = 503
    default_message = "storage unavailable"
