"""
Shared pytest fixtures.

The Mongo-backed repository is replaced by `InMemoryProductStore`, which
honours the same contract (ObjectId ids, InvalidId on malformed ids,
case-insensitive name/category matching), so no database is needed.
"""

import os
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("APP_ENV", "development")

from app.domain.models.product import Product
from app.domain.services.product_svc import ProductService


class InMemoryProductStore:
    """Dict-backed ProductStore; keeps insertion order like a fresh collection."""

    def __init__(self):
        self.docs: Dict[str, Product] = {}

    @staticmethod
    def _check(product_id: str) -> str:
        return str(ObjectId(product_id))  # raises InvalidId

    def _all(self) -> List[Product]:
        return [p.model_copy() for p in self.docs.values()]

    async def save(self, product: Product) -> Product:
        stored = product.model_copy(update={"image_base64": None})
        if stored.id is None:
            stored = stored.model_copy(update={"id": str(ObjectId())})
        elif self._check(stored.id) not in self.docs:
            # replace only, a deleted id is not brought back
            return stored.model_copy()
        self.docs[stored.id] = stored
        return stored.model_copy()

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        doc = self.docs.get(self._check(product_id))
        return doc.model_copy() if doc else None

    async def find_all(self) -> List[Product]:
        return self._all()

    async def delete_by_id(self, product_id: str) -> None:
        self.docs.pop(self._check(product_id), None)

    async def exists_by_id(self, product_id: str) -> bool:
        return self._check(product_id) in self.docs

    async def find_by_name_containing(self, name: str) -> List[Product]:
        return [p for p in self._all() if name.lower() in p.name.lower()]

    async def find_by_category(self, category: str) -> List[Product]:
        return [p for p in self._all() if (p.category or "").lower() == category.lower()]

    async def find_by_price_between(self, min_price, max_price) -> List[Product]:
        return [
            p for p in self._all()
            if (min_price is None or p.price > min_price) and (max_price is None or p.price < max_price)
        ]

    async def find_by_name_containing_and_category(self, name: str, category: str) -> List[Product]:
        by_name = await self.find_by_name_containing(name)
        return [p for p in by_name if (p.category or "").lower() == category.lower()]


@pytest.fixture
def store():
    return InMemoryProductStore()


@pytest.fixture
def service(store):
    return ProductService(store)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest_asyncio.fixture
async def test_client(service):
    """HTTPX AsyncClient talking to the app, with the product service overridden."""
    from app.main import app
    from app.api.deps import product_service

    app.dependency_overrides[product_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
