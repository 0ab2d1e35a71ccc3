# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.database import InMemoryProductRepository
from storefront.errors import UpstreamError
from storefront.main import create_app

ADMIN = {"Authorization": "Bearer secret"}
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeUploader:
    def __init__(self):
        self.calls = []
        self.fail = False

    async def upload(self, image):
        if self.fail:
            raise UpstreamError("image host unreachable")
        self.calls.append(image)
        return f"https://img.example.com/{len(self.calls)}/{image.filename}"


@pytest.fixture
def settings():
    return Settings(database_url="memory://", admin_password="secret", whatsapp_number="584121410816")


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def repository():
    return InMemoryProductRepository()


@pytest.fixture
def client(settings, repository, uploader):
    return TestClient(create_app(settings, repository, uploader))
