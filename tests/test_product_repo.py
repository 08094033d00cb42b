"""
ProductRepo tests: Mongo query shapes and document mapping, with a mocked
Motor collection.
"""

import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from bson.errors import InvalidId

from app.domain.models.product import Product
from app.domain.repositories.product_repo import (
    ProductRepo,
    category_filter,
    from_document,
    name_containing_filter,
    price_between_filter,
    to_document,
)


def _repo():
    col = MagicMock()
    db = MagicMock()
    db.__getitem__.return_value = col
    return ProductRepo(db), col


class TestQueryBuilders:

    def test_name_filter_is_escaped_case_insensitive_substring(self):
        q = name_containing_filter("a.b (x)")
        assert q == {"name": {"$regex": re.escape("a.b (x)"), "$options": "i"}}
        assert re.search(q["name"]["$regex"], "my A.B (X) item", re.I)
        assert not re.search(q["name"]["$regex"], "aXb (x)", re.I)

    def test_category_filter_is_anchored(self):
        pattern = category_filter("Home+")["category"]["$regex"]
        assert re.fullmatch(pattern, "home+", re.I)
        assert not re.search(pattern, "Home+Garden", re.I)

    def test_price_between_is_exclusive_and_open_ended(self):
        assert price_between_filter(1.0, 5.0) == {"price": {"$gt": 1.0, "$lt": 5.0}}
        assert price_between_filter(None, 5.0) == {"price": {"$lt": 5.0}}
        assert price_between_filter(None, None) == {}


class TestDocumentMapping:

    def test_base64_field_is_never_persisted(self):
        doc = to_document(Product(id="x", name="n", price=1.0, image_base64="aGk="))
        assert "image_base64" not in doc
        assert "id" not in doc

    def test_from_document_stringifies_object_id(self):
        oid = ObjectId()
        product = from_document({"_id": oid, "name": "n", "price": 2.0, "image": b"\x01"})
        assert product.id == str(oid)
        assert product.image == b"\x01"


class TestProductRepo:

    @pytest.mark.asyncio
    async def test_save_new_inserts_and_returns_id(self):
        repo, col = _repo()
        oid = ObjectId()
        col.insert_one = AsyncMock(return_value=MagicMock(inserted_id=oid))

        saved = await repo.save(Product(name="n", price=1.0))

        assert saved.id == str(oid)
        col.insert_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_existing_replaces_without_upsert(self):
        repo, col = _repo()
        col.replace_one = AsyncMock()
        oid = ObjectId()

        await repo.save(Product(id=str(oid), name="n", price=1.0))

        args, kwargs = col.replace_one.await_args
        assert args[0] == {"_id": oid}
        assert kwargs == {"upsert": False}

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self):
        repo, col = _repo()
        col.find_one = AsyncMock(return_value=None)
        assert await repo.find_by_id(str(ObjectId())) is None

    @pytest.mark.asyncio
    async def test_malformed_id_raises_invalid_id(self):
        repo, _ = _repo()
        with pytest.raises(InvalidId):
            await repo.find_by_id("nope")
        with pytest.raises(InvalidId):
            await repo.exists_by_id("nope")

    @pytest.mark.asyncio
    async def test_exists_by_id_counts(self):
        repo, col = _repo()
        col.count_documents = AsyncMock(return_value=1)
        assert await repo.exists_by_id(str(ObjectId())) is True
