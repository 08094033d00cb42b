import base64
import logging
import time
from typing import List, Optional

from bson.errors import InvalidId

from app.domain.models.product import DEFAULT_IMAGE_CONTENT_TYPE, Product
from app.domain.repositories.product_repo import ProductStore

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_image(product: Product) -> Product:
    """
    Resolve the image payload of an incoming product before it is stored.

    - `image_base64` is decoded into `image` when no raw image was given.
      Invalid base64 is ignored: the product is kept without an image.
    - An image without a content type gets `image/*`.
    - `image_base64` itself is always dropped.
    """
    image = product.image
    content_type = product.image_content_type

    if image is None and product.image_base64:
        try:
            image = base64.b64decode(product.image_base64, validate=True)
        except ValueError as e:  # binascii.Error or non-ASCII input
            logger.warning("create: ignoring invalid base64 image (%s)", e)
            image = None

    if image and not content_type:
        content_type = DEFAULT_IMAGE_CONTENT_TYPE

    return product.model_copy(
        update={"image": image, "image_content_type": content_type, "image_base64": None}
    )


class ProductService:
    """Business operations over products; the store is injected."""

    def __init__(self, store: ProductStore):
        self.store = store

    async def list_all(self, sort_by_price: bool = False) -> List[Product]:
        products = await self.store.find_all()
        if sort_by_price:
            # sorted() is stable, ties keep storage order
            products = sorted(products, key=lambda p: p.price)
        return products

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        try:
            return await self.store.find_by_id(product_id)
        except InvalidId:
            logger.debug("get_by_id: malformed id=%r", product_id)
            return None

    async def create(self, product: Product) -> Product:
        t0 = time.perf_counter()
        created = await self.store.save(normalize_image(product.model_copy(update={"id": None})))
        logger.info(
            "create ok id=%s has_image=%s time=%.3fs",
            created.id, created.has_image, time.perf_counter() - t0,
        )
        return created

    async def update(self, product_id: str, changes: Product) -> Optional[Product]:
        existing = await self.get_by_id(product_id)
        if existing is None:
            return None

        update = {
            "name": changes.name,
            "price": changes.price,
            "description": changes.description,
            "category": changes.category,
        }
        if changes.image:
            update["image"] = changes.image
            update["image_content_type"] = changes.image_content_type or DEFAULT_IMAGE_CONTENT_TYPE

        saved = await self.store.save(existing.model_copy(update=update))
        logger.info("update ok id=%s image_replaced=%s", product_id, bool(changes.image))
        return saved

    async def delete(self, product_id: str) -> bool:
        try:
            if not await self.store.exists_by_id(product_id):
                return False
            await self.store.delete_by_id(product_id)
        except InvalidId:
            logger.debug("delete: malformed id=%r", product_id)
            return False
        logger.info("delete ok id=%s", product_id)
        return True

    async def search_by_name(self, name: str) -> List[Product]:
        return await self.store.find_by_name_containing(name)

    async def search_by_category(self, category: str) -> List[Product]:
        return await self.store.find_by_category(category)

    async def list_by_price_range(
        self, min_price: Optional[float] = None, max_price: Optional[float] = None
    ) -> List[Product]:
        return await self.store.find_by_price_between(min_price, max_price)

    async def search(self, name: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        has_name = not _is_blank(name)
        has_category = not _is_blank(category)
        logger.debug("search name=%r category=%r", name, category)

        if has_name and has_category:
            return await self.store.find_by_name_containing_and_category(name, category)
        if has_name:
            return await self.search_by_name(name)
        if has_category:
            return await self.search_by_category(category)
        return await self.store.find_all()
