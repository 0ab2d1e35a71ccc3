# storefront/uploads.py
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .config import Settings
from .errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes


class ImageUploader(Protocol):
    async def upload(self, image: ImageUpload) -> str: ...


def validate_image(image: ImageUpload, max_bytes: int) -> None:
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("only image uploads are allowed")
    if not image.data:
        raise ValidationError("image file is empty")
    if len(image.data) > max_bytes:
        raise ValidationError(f"image exceeds {max_bytes} bytes")


class CloudinaryUploader:
    """Unsigned upload to Cloudinary; returns the hosted ``secure_url``."""

    def __init__(self, cloud_name: str, upload_preset: str, folder: str = "storefront", timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = CLOUDINARY_UPLOAD_URL.format(cloud_name=cloud_name)
        self.upload_preset = upload_preset
        self.folder = folder
        self.timeout = timeout
        self.transport = transport

    async def upload(self, image: ImageUpload) -> str:
        files = {"file": (image.filename, image.data, image.content_type)}
        data = {"upload_preset": self.upload_preset, "folder": self.folder}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(self.url, data=data, files=files)
                r.raise_for_status()
                body = r.json()
        except httpx.HTTPStatusError as e:
            logger.error("image host rejected upload: HTTP %s", e.response.status_code)
            raise UpstreamError(f"image host returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("image upload failed: %s", e)
            raise UpstreamError("image host unreachable") from e

        url = body.get("secure_url") if isinstance(body, dict) else None
        if not url:
            raise UpstreamError("image host returned no url")
        logger.info("uploaded image %s", image.filename)
        return url


class DisabledUploader:
    async def upload(self, image: ImageUpload) -> str:
        raise UpstreamError("image uploads are not configured")


def build_uploader(settings: Settings) -> ImageUploader:
    if settings.uploads_enabled:
        return CloudinaryUploader(
            settings.cloudinary_cloud_name,
            settings.cloudinary_upload_preset,
            folder=settings.cloudinary_folder,
        )
    return DisabledUploader()
