"""
API v1 routers
"""

from fastapi import APIRouter

from .categories import router as categories_router
from .formats import router as formats_router
from .health import router as health_router
from .media import router as media_router
from .products import router as products_router

api_router = APIRouter()

# Include routers
api_router.include_router(health_router, tags=["health"])
api_router.include_router(categories_router, prefix="/categories", tags=["categories"])
api_router.include_router(formats_router, prefix="/formats", tags=["formats"])
api_router.include_router(media_router, prefix="/media", tags=["media"])
api_router.include_router(products_router, prefix="/products", tags=["products"])
