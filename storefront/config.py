# storefront/config.py
import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

MEMORY_DATABASE_URL = "memory://"


class Settings(BaseModel):
    database_url: str = "sqlite:///storefront.db"
    admin_password: Optional[str] = None
    whatsapp_number: str = "584121410816"
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_upload_preset: Optional[str] = None
    cloudinary_folder: str = "storefront"
    max_image_bytes: int = 5 * 1024 * 1024
    log_level: str = "INFO"
    shop_name: str = "KEROVIC"

    @property
    def uses_memory_store(self) -> bool:
        return self.database_url == MEMORY_DATABASE_URL

    @property
    def uploads_enabled(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_upload_preset)

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            admin_password=os.getenv("ADMIN_PASSWORD") or None,
            whatsapp_number=os.getenv("WHATSAPP_NUMBER", defaults.whatsapp_number),
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME") or None,
            cloudinary_upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET") or None,
            cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", defaults.cloudinary_folder),
            max_image_bytes=int(os.getenv("MAX_IMAGE_BYTES", defaults.max_image_bytes)),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            shop_name=os.getenv("SHOP_NAME", defaults.shop_name),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
