"""
Pydantic models for catalog products.

A product is a sellable item with a unit price.  Products are created
and deleted but never updated; bills snapshot the name and price at
billing time so deleting a product does not alter historical bills.
"""

from typing import List

from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(..., examples=["Coffee"])
    # strict: reject numeric strings and booleans, accept ints and floats
    price: float = Field(..., strict=True, examples=[2.5])


class ProductCreate(ProductBase):
    """Schema for adding a product to the catalog."""
    pass


class ProductRead(ProductBase):
    """Schema for reading a product."""

    id: int

    model_config = {
        "from_attributes": True,
    }


class ProductDelete(BaseModel):
    """Body of ``DELETE /products``."""

    id: int = Field(..., strict=True, examples=[1])


class ProductDeleteResult(BaseModel):
    message: str
    products: List[ProductRead]
