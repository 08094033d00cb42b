# app/core/lifespan.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from app.db import mongo
from app.core.config import get_settings
from app.domain.repositories.product_repo import ProductRepo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    try:
        await mongo.connect()
    except Exception as e:
        logger.error("Mongo client init failed: %s", e)
        raise

    try:
        await ProductRepo(mongo.get_db(), settings.products_collection).ensure_indexes()
    except Exception as e:
        logger.warning("Index creation skipped: %s", e)

    # Application runs
    yield

    # --- Shutdown ---
    await mongo.disconnect()
    logger.info("Mongo disconnected")
