"""
Pydantic models for registry entries and their bills.

A registry entry is one customer visit on one calendar day.  Entry ids
are only unique within a date, so every mutation addresses an entry by
the ``(id, date)`` pair.  Fields use snake_case in Python and the
camelCase names clients already rely on (``billItems``,
``totalPrice``...) on the wire.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class EntryStatus(str, Enum):
    """Lifecycle of a registry entry.

    ``pending`` is the initial state and ``done`` is terminal.  Holding is
    optional: an entry may be billed straight from ``pending``.
    """

    PENDING = "pending"
    ON_HOLD = "on-hold"
    DONE = "done"


class EntryAction(str, Enum):
    HOLD = "hold"
    CREATE_BILL = "createBill"


class BillItemCreate(BaseModel):
    """One requested bill line: a product and how many of it."""

    product_id: int = Field(..., alias="productId", strict=True, examples=[1])
    quantity: int = Field(..., strict=True, examples=[2])

    model_config = {
        "populate_by_name": True,
    }


class BillItem(BaseModel):
    """A bill line with the product name and price captured at billing time."""

    product_id: int = Field(..., alias="productId")
    product_name: str = Field(..., alias="productName")
    quantity: int
    unit_price: float = Field(..., alias="unitPrice")
    sub_total: float = Field(..., alias="subTotal")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }


class RegistryEntryCreate(BaseModel):
    """Schema for registering a customer for today."""

    name: str = Field(..., examples=["Alice"])
    number: str = Field(..., examples=["555"])


class RegistryEntryRead(BaseModel):
    """Schema for reading a registry entry."""

    id: int
    name: str
    number: str
    date: str = Field(..., examples=["2024-01-01"])
    status: EntryStatus = EntryStatus.PENDING
    bill_items: List[BillItem] = Field(default_factory=list, alias="billItems")
    total_price: float = Field(0, alias="totalPrice")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }


class RegistryEntryKey(BaseModel):
    """Identifies one entry: ids repeat across days."""

    id: int = Field(..., strict=True, examples=[123])
    date: str = Field(..., examples=["2024-01-01"])


class RegistryEntryUpdate(RegistryEntryKey):
    """Body of ``PATCH /registry``.

    ``action`` selects the transition.  ``billItems`` is required for
    ``createBill`` and ignored for ``hold``.
    """

    action: str = Field(..., examples=["createBill"])
    bill_items: Optional[List[BillItemCreate]] = Field(None, alias="billItems")

    model_config = {
        "populate_by_name": True,
    }


class RegistryDeleteResult(BaseModel):
    message: str
    entries: List[RegistryEntryRead]
