# app/api/deps.py
from fastapi import Depends
from app.core.config import get_settings
from app.db.mongo import get_db
from app.domain.repositories.product_repo import ProductRepo
from app.domain.services.product_svc import ProductService

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    # Returns the MongoDB database instance (async)
    return db

# Dependency for injecting the product service (overridden in tests)
def product_service(db = Depends(mongo_db)) -> ProductService:
    settings = get_settings()
    return ProductService(ProductRepo(db, settings.products_collection))
