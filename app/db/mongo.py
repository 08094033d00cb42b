# app/db/mongo.py
import logging

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _new_client() -> AsyncIOMotorClient:
    kwargs = {
        "serverSelectionTimeoutMS": 6000,
        "connectTimeoutMS": 6000,
    }
    if settings.MONGO_TLS:
        # explicit CA bundle, containers often ship without one
        kwargs.update(tls=True, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(settings.MONGO_URI, **kwargs)


async def connect():
    """
    Create the Motor client and ping the server.
    A failed ping does not abort startup: the client stays lazy and the
    first real query retries the connection.
    """
    global _client, _db

    _client = _new_client()
    _db = _client[settings.MONGO_DB]
    try:
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.warning("Mongo ping at startup failed: %s", e)
        logger.warning("Mongo will attempt lazy connection on first query")


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
