"""
Service layer for the product catalog.

The catalog is a flat list of sellable products.  Products are added
and deleted; there is no update.  Ids are assigned as the highest
existing id plus one, starting at 1 for an empty catalog.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List

from registry_pos_api.app.core.errors import InvalidArgument, NotFound
from registry_pos_api.app.core.store import Store
from registry_pos_api.app.schemas.product import ProductRead

logger = logging.getLogger(__name__)


class ProductService:
    """Catalog operations over an injected ``Store``."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def list_products(self) -> List[ProductRead]:
        """Return all products in insertion order."""
        return self.store.list_products()

    async def add_product(self, name: Any, price: Any) -> ProductRead:
        """Validate and append a new product.

        ``name`` must be non-blank text; it is stored trimmed.  ``price``
        must be a finite, non-negative int or float (``bool`` is
        rejected even though it subclasses ``int``).
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument('"name" must be a non-empty string.')
        if (
            isinstance(price, bool)
            or not isinstance(price, (int, float))
            or not math.isfinite(price)
            or price < 0
        ):
            raise InvalidArgument('"price" must be a non-negative number.')

        products = self.store.list_products()
        new_id = max((p.id for p in products), default=0) + 1
        product = ProductRead(id=new_id, name=name.strip(), price=float(price))
        self.store.add_product(product)
        logger.info("Added product %s (%s at %.2f)", product.id, product.name, product.price)
        return product

    async def delete_product(self, product_id: int) -> List[ProductRead]:
        """Remove a product and return the remaining catalog.

        Bills already issued keep their snapshot of the product.
        """
        products = self.store.list_products()
        if not any(p.id == product_id for p in products):
            raise NotFound(f"No product found with id={product_id}.")
        self.store.delete_product(product_id)
        logger.info("Deleted product %s", product_id)
        return [p for p in products if p.id != product_id]
