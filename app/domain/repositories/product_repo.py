# app/domain/repositories/product_repo.py

from __future__ import annotations
import re
from typing import Any, Dict, List, Optional, Protocol

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING

from app.domain.models.product import Product


class ProductStore(Protocol):
    """
    Storage contract the product service relies on.
    Id-based methods raise `bson.errors.InvalidId` for malformed identifiers.
    """

    async def save(self, product: Product) -> Product: ...
    async def find_by_id(self, product_id: str) -> Optional[Product]: ...
    async def find_all(self) -> List[Product]: ...
    async def delete_by_id(self, product_id: str) -> None: ...
    async def exists_by_id(self, product_id: str) -> bool: ...
    async def find_by_name_containing(self, name: str) -> List[Product]: ...
    async def find_by_category(self, category: str) -> List[Product]: ...
    async def find_by_price_between(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]: ...
    async def find_by_name_containing_and_category(self, name: str, category: str) -> List[Product]: ...


# ----- Query builders ---------------------------------------------------------

def name_containing_filter(name: str) -> Dict[str, Any]:
    """Case-insensitive substring match on `name`."""
    return {"name": {"$regex": re.escape(name), "$options": "i"}}


def category_filter(category: str) -> Dict[str, Any]:
    """Case-insensitive exact match on `category`."""
    return {"category": {"$regex": f"^{re.escape(category)}$", "$options": "i"}}


def price_between_filter(min_price: Optional[float], max_price: Optional[float]) -> Dict[str, Any]:
    """Exclusive bounds; a missing bound leaves that side open."""
    ops: Dict[str, Any] = {}
    if min_price is not None:
        ops["$gt"] = min_price
    if max_price is not None:
        ops["$lt"] = max_price
    return {"price": ops} if ops else {}


def to_document(product: Product) -> Dict[str, Any]:
    # image_base64 is excluded from the dump, it is never persisted
    return product.model_dump(exclude={"id"})


def from_document(doc: Dict[str, Any]) -> Product:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return Product.model_validate(data)


class ProductRepo:
    """
    Product repository backed by the 'products' collection.
    Documents are keyed by the ObjectId Mongo assigns on insert; the API
    exposes it as the string `id`.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col: AsyncIOMotorCollection = db[collection_name]

    async def ensure_indexes(self) -> None:
        await self.col.create_index([("category", ASCENDING)])
        await self.col.create_index([("price", ASCENDING)])

    async def _find(self, query: Dict[str, Any]) -> List[Product]:
        cursor = self.col.find(query)
        return [from_document(doc) async for doc in cursor]

    # ----- CRUD ----------------------------------------------------------------

    async def save(self, product: Product) -> Product:
        doc = to_document(product)
        if product.id is None:
            res = await self.col.insert_one(doc)
            return product.model_copy(update={"id": str(res.inserted_id), "image_base64": None})

        await self.col.replace_one({"_id": ObjectId(product.id)}, doc, upsert=False)
        return product.model_copy(update={"image_base64": None})

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        doc = await self.col.find_one({"_id": ObjectId(product_id)})
        return from_document(doc) if doc else None

    async def find_all(self) -> List[Product]:
        return await self._find({})

    async def delete_by_id(self, product_id: str) -> None:
        await self.col.delete_one({"_id": ObjectId(product_id)})

    async def exists_by_id(self, product_id: str) -> bool:
        return await self.col.count_documents({"_id": ObjectId(product_id)}, limit=1) > 0

    # ----- Filtered queries ------------------------------------------------------

    async def find_by_name_containing(self, name: str) -> List[Product]:
        return await self._find(name_containing_filter(name))

    async def find_by_category(self, category: str) -> List[Product]:
        return await self._find(category_filter(category))

    async def find_by_price_between(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]:
        return await self._find(price_between_filter(min_price, max_price))

    async def find_by_name_containing_and_category(self, name: str, category: str) -> List[Product]:
        return await self._find({**name_containing_filter(name), **category_filter(category)})
