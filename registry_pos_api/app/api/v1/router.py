"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (auth, products, registry).
When new domains are introduced, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import auth, products, registry

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(products.router, prefix="/products", tags=["products"])
router.include_router(registry.router, prefix="/registry", tags=["registry"])
