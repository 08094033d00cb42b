# app/api/v1/routers/products.py

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from typing import Annotated, List, Optional
import time

from app.api.deps import product_service
from app.api.errors import ErrorTranslatingRoute, ProductNotFoundError
from app.api.v1.schemas.product import NON_BLANK, ProductIn, ProductOut
from app.domain.models.product import FALLBACK_IMAGE_MEDIA_TYPE, Product
from app.domain.services.product_svc import ProductService

import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"], route_class=ErrorTranslatingRoute)

ServiceDep = Annotated[ProductService, Depends(product_service)]


def _out(products: List[Product]) -> List[ProductOut]:
    return [ProductOut.from_domain(p) for p in products]


async def _form_product(
    name: str,
    price: float,
    description: Optional[str],
    category: Optional[str],
    image: Optional[UploadFile],
) -> Product:
    """Build a product from multipart fields; an empty file part means no image."""
    product = Product(name=name, price=price, description=description, category=category)
    if image is not None:
        content = await image.read()
        await image.close()
        if content:
            product = product.model_copy(update={"image": content, "image_content_type": image.content_type})
    return product


# ----- Collection routes (declared before /{product_id}) --------------------------

@router.get("", response_model=List[ProductOut], summary="List products")
async def list_products(
    service: ServiceDep,
    sort: Optional[str] = Query(None, description="'price' to sort ascending by price"),
):
    logger.info("Request: list_products sort=%s", sort)
    products = await service.list_all(sort_by_price=(sort == "price"))
    logger.info("Response: list_products count=%s", len(products))
    return _out(products)


@router.get("/search", response_model=List[ProductOut], summary="Search by name and/or category")
async def search_products(
    service: ServiceDep,
    name: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    category: Optional[str] = Query(None, description="Case-insensitive exact category"),
):
    logger.info("Request: search_products name=%r category=%r", name, category)
    start_time = time.perf_counter()
    products = await service.search(name, category)
    logger.info(
        "Response: search_products count=%s elapsed_time=%.4fs",
        len(products), time.perf_counter() - start_time,
    )
    return _out(products)


@router.get("/price-range", response_model=List[ProductOut], summary="Products priced strictly between bounds")
async def products_in_price_range(
    service: ServiceDep,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
):
    logger.info("Request: products_in_price_range min_price=%s max_price=%s", min_price, max_price)
    return _out(await service.list_by_price_range(min_price, max_price))


@router.post("", status_code=201, response_model=ProductOut, summary="Create a product (JSON)")
async def create_product(payload: ProductIn, service: ServiceDep):
    logger.info("Request: create_product name=%r", payload.name)
    return ProductOut.from_domain(await service.create(payload.to_domain()))


@router.post("/multipart/create", status_code=201, response_model=ProductOut, summary="Create a product (multipart)")
async def create_product_multipart(
    service: ServiceDep,
    name: str = Form(..., pattern=NON_BLANK),
    price: float = Form(..., ge=0),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    logger.info("Request: create_product_multipart name=%r", name)
    product = await _form_product(name, price, description, category, image)
    return ProductOut.from_domain(await service.create(product))


# ----- Item routes ------------------------------------------------------------------

@router.get("/{product_id}", response_model=ProductOut, summary="Get a product")
async def get_product(product_id: str, service: ServiceDep):
    product = await service.get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductOut.from_domain(product)


@router.put("/{product_id}", response_model=ProductOut, summary="Update a product (JSON)")
async def update_product(product_id: str, payload: ProductIn, service: ServiceDep):
    logger.info("Request: update_product product_id=%s", product_id)
    updated = await service.update(product_id, payload.to_domain())
    if updated is None:
        raise ProductNotFoundError(product_id)
    return ProductOut.from_domain(updated)


@router.put("/{product_id}/multipart", response_model=ProductOut, summary="Update a product (multipart)")
async def update_product_multipart(
    product_id: str,
    service: ServiceDep,
    name: str = Form(..., pattern=NON_BLANK),
    price: float = Form(..., ge=0),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    logger.info("Request: update_product_multipart product_id=%s", product_id)
    changes = await _form_product(name, price, description, category, image)
    updated = await service.update(product_id, changes)
    if updated is None:
        raise ProductNotFoundError(product_id)
    return ProductOut.from_domain(updated)


@router.get("/{product_id}/image", summary="Raw product image")
async def get_product_image(product_id: str, service: ServiceDep):
    product = await service.get_by_id(product_id)
    if product is None or not product.has_image:
        raise ProductNotFoundError(product_id)
    return Response(
        content=product.image,
        media_type=product.image_content_type or FALLBACK_IMAGE_MEDIA_TYPE,
    )


@router.delete("/{product_id}", status_code=204, summary="Delete a product")
async def delete_product(product_id: str, service: ServiceDep):
    logger.info("Request: delete_product product_id=%s", product_id)
    if not await service.delete(product_id):
        raise ProductNotFoundError(product_id)
    return Response(status_code=204)
