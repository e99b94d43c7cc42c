"""
Test configuration and fixtures
"""

import copy

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

from bookcatalog.api.deps import get_catalog_service
from bookcatalog.main import app
from bookcatalog.schemas.media import MediaItem
from bookcatalog.schemas.product import ProductVariant, UploadedFile
from bookcatalog.services.category_hierarchy import CategoryHierarchy

from tests.fakes import CATEGORY_FOREST, FakeCatalogService


@pytest.fixture
def category_forest():
    """Raw category forest, a fresh copy per test"""
    return copy.deepcopy(CATEGORY_FOREST)


@pytest.fixture
def hierarchy(category_forest):
    return CategoryHierarchy(category_forest)


@pytest.fixture
def physical_variant():
    return ProductVariant(
        id="f-1", format_type="physical", price="100000", discount_price="80000", stock_quantity=3
    )


@pytest.fixture
def ebook_variant():
    return ProductVariant(id="f-2", format_type="ebook", price="50000", file_url="https://cdn.example.com/a.pdf")


@pytest.fixture
def pdf_upload():
    return UploadedFile(filename="book.pdf", content_type="application/pdf", size=1024, content=b"%PDF-1.7")


@pytest.fixture
def image_upload():
    return UploadedFile(filename="new-cover.jpg", content_type="image/jpeg", size=2048, content=b"\xff\xd8")


@pytest.fixture
def persisted_media():
    return [
        MediaItem(id="m-1", role="cover", title="cover.jpg", url="https://cdn.example.com/media/cover.jpg"),
        MediaItem(id="m-2", role="gallery", title="page-1.jpg", url="https://cdn.example.com/media/page-1.jpg"),
        MediaItem(id="m-3", role="backCover", title="back.jpg", url="https://cdn.example.com/media/back.jpg"),
    ]


@pytest.fixture
def fake_catalog():
    return FakeCatalogService()


@pytest_asyncio.fixture
async def client(fake_catalog):
    """Test client with the catalog service replaced by the in-memory fake"""

    async def get_test_catalog():
        yield fake_catalog

    app.dependency_overrides[get_catalog_service] = get_test_catalog

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
