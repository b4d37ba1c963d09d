"""
Product catalog endpoints for API v1.

The catalog is a flat list; products are added with a name and a unit
price and removed by id.  All routes require an unlocked device.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from registry_pos_api.app.api.deps import get_product_service
from registry_pos_api.app.core.security import require_device
from registry_pos_api.app.schemas.product import (
    ProductCreate,
    ProductDelete,
    ProductDeleteResult,
    ProductRead,
)
from registry_pos_api.app.services.product_service import ProductService

router = APIRouter(dependencies=[Depends(require_device)])


@router.get("", response_model=List[ProductRead])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> List[ProductRead]:
    """Return the full catalog in insertion order."""
    return await service.list_products()


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def add_product(
    product_in: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Add a product.  The id is the highest existing id plus one."""
    return await service.add_product(product_in.name, product_in.price)


@router.delete("", response_model=ProductDeleteResult)
async def delete_product(
    body: ProductDelete,
    service: ProductService = Depends(get_product_service),
) -> ProductDeleteResult:
    """Delete a product by id and return what is left of the catalog."""
    remaining = await service.delete_product(body.id)
    return ProductDeleteResult(message=f"Product id={body.id} deleted.", products=remaining)
