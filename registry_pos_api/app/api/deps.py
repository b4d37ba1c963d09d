"""
FastAPI dependencies shared by the v1 endpoints.

The store and the clock live on ``app.state`` (set by
``main.create_app``); services are built per request around them.
"""

from fastapi import Depends, Request

from registry_pos_api.app.core.store import Store
from registry_pos_api.app.services.product_service import ProductService
from registry_pos_api.app.services.registry_service import RegistryService


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_product_service(store: Store = Depends(get_store)) -> ProductService:
    return ProductService(store)


def get_registry_service(
    request: Request,
    store: Store = Depends(get_store),
    catalog: ProductService = Depends(get_product_service),
) -> RegistryService:
    return RegistryService(store, catalog, clock=request.app.state.clock)
