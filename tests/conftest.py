"""
Shared pytest fixtures.

The environment is pinned before any app module is imported: settings are
cached on first use and the dependency container is built at import time.
"""
import io
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="catalog_test_")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TMP, "logs")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ASSET_HOST"] = "local"
os.environ["AUTH_ENABLED"] = "true"
os.environ["AUTH_TOKENS"] = "test-token,other-token"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image
from starlette.datastructures import Headers
from fastapi import UploadFile

from app.config.settings import get_settings
from app.controllers import CategoryController
from app.repositories import (
    CategoryRepository,
    SubcategoryRepository,
    ProductRepository,
    CompanyRepository
)
from app.services.auth_gate import TokenAuthGate

from fakes import FakeAssetHost, FakeDatabase

AUTH_HEADERS = {"Authorization": "Bearer test-token"}


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def asset_host(fake_db):
    return FakeAssetHost(fake_db.events)


def _repo(cls, db, settings):
    repo = cls(db)
    repo.set_settings(settings)
    return repo


@pytest.fixture
def repos(fake_db, settings):
    """Real repositories bound to the in-memory database."""
    return {
        "category": _repo(CategoryRepository, fake_db, settings),
        "subcategory": _repo(SubcategoryRepository, fake_db, settings),
        "product": _repo(ProductRepository, fake_db, settings),
        "company": _repo(CompanyRepository, fake_db, settings),
    }


@pytest.fixture
def controller(repos, asset_host, settings):
    return CategoryController(
        category_repo=repos["category"],
        subcategory_repo=repos["subcategory"],
        product_repo=repos["product"],
        company_repo=repos["company"],
        asset_host=asset_host,
        settings=settings
    )


@pytest.fixture
def collections(fake_db, settings):
    return {
        "categories": fake_db[settings.categories_collection],
        "subcategories": fake_db[settings.subcategories_collection],
        "products": fake_db[settings.products_collection],
        "companies": fake_db[settings.companies_collection],
    }


@pytest.fixture
def png_bytes():
    """A tiny valid PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (2, 2), color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_upload(png_bytes):
    """Build an UploadFile like the ones FastAPI hands to the controller."""
    def _make(content: bytes = None, filename: str = "logo.png", content_type: str = "image/png"):
        return UploadFile(
            file=io.BytesIO(png_bytes if content is None else content),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )
    return _make


@pytest.fixture
def app(controller):
    from app.main import app as fastapi_app
    from app.core.dependencies import get_auth_gate, get_category_controller

    fastapi_app.dependency_overrides[get_category_controller] = lambda: controller
    fastapi_app.dependency_overrides[get_auth_gate] = lambda: TokenAuthGate(["test-token"])
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """HTTPX AsyncClient talking to the app without a server."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    return dict(AUTH_HEADERS)
