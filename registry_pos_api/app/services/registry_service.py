"""
Service layer for the daily customer registry.

Each registry entry belongs to one calendar day and gets a random id
between ``MIN_ENTRY_ID`` and ``MAX_ENTRY_ID`` that is unique for that
day.  Entries move through ``pending -> on-hold -> done``; holding is
optional and ``done`` is reached only by billing.  Billing snapshots
the product names and prices from the catalog so later catalog changes
never alter an issued bill.

All operations read the store, change the data in memory and write it
back only once every check has passed, so a rejected request leaves
the store untouched.
"""

from __future__ import annotations

import logging
import random
from datetime import date as date_cls
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, List, Optional

from pydantic import ValidationError

from registry_pos_api.app.core.errors import (
    InvalidArgument,
    InvalidState,
    NotFound,
    ResourceExhausted,
)
from registry_pos_api.app.core.store import Store
from registry_pos_api.app.schemas.registry import (
    BillItem,
    BillItemCreate,
    EntryStatus,
    RegistryEntryRead,
)
from registry_pos_api.app.services.product_service import ProductService

logger = logging.getLogger(__name__)

MIN_ENTRY_ID = 100
MAX_ENTRY_ID = 700
DAILY_ID_CAPACITY = MAX_ENTRY_ID - MIN_ENTRY_ID + 1

DONE_FILTER = "done"

_CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f'"{field}" must be a non-empty string.')
    return value.strip()


class RegistryService:
    """Registry operations over an injected ``Store``.

    ``clock`` returns today's date and ``rng`` draws entry ids; both are
    injectable so tests can pin the day and the random sequence.
    """

    def __init__(
        self,
        store: Store,
        catalog: ProductService,
        clock: Callable[[], date_cls] = date_cls.today,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.rng = rng or random.Random()

    async def list_entries(self, status_filter: Optional[str] = None) -> List[RegistryEntryRead]:
        """Return the registry board.

        The latest date present in the store is treated as "today's
        board".  With ``status_filter == "done"`` the result is every
        done entry plus every entry on the latest date, whatever its
        status.  Any other filter returns only unfinished entries on the
        latest date, so unfinished entries from earlier days drop out of
        this view as soon as a newer day has entries.
        """
        entries = self.store.list_entries()
        latest_date = max((e.date for e in entries), default=None)
        if status_filter == DONE_FILTER:
            return [
                e for e in entries
                if e.status == EntryStatus.DONE or e.date == latest_date
            ]
        return [
            e for e in entries
            if e.status != EntryStatus.DONE and e.date == latest_date
        ]

    async def get_entry(self, entry_id: int, date: str) -> RegistryEntryRead:
        return self._find(self.store.list_entries(), entry_id, date)

    async def create_entry(self, name: Any, number: Any) -> RegistryEntryRead:
        """Register a customer for today under a random, unused id."""
        name = _require_text(name, "name")
        number = _require_text(number, "number")

        today = self.clock().isoformat()
        used_ids = {e.id for e in self.store.list_entries() if e.date == today}
        if len(used_ids) >= DAILY_ID_CAPACITY:
            raise ResourceExhausted("No more available IDs for today.")

        entry_id = self.rng.randint(MIN_ENTRY_ID, MAX_ENTRY_ID)
        while entry_id in used_ids:
            entry_id = self.rng.randint(MIN_ENTRY_ID, MAX_ENTRY_ID)

        entry = RegistryEntryRead(
            id=entry_id,
            name=name,
            number=number,
            date=today,
            status=EntryStatus.PENDING,
            bill_items=[],
            total_price=0,
        )
        self.store.add_entry(entry)
        logger.info("Registered entry %s on %s for %s", entry.id, entry.date, entry.name)
        return entry

    async def hold_entry(self, entry_id: int, date: str) -> RegistryEntryRead:
        """Put an unfinished entry on hold; billed entries cannot be held."""
        entry = self._find(self.store.list_entries(), entry_id, date)
        if entry.status == EntryStatus.DONE:
            raise InvalidState("Cannot hold an entry that is already done.")
        updated = entry.model_copy(update={"status": EntryStatus.ON_HOLD})
        self.store.update_entry(updated)
        logger.info("Entry %s on %s put on hold", entry_id, date)
        return updated

    async def create_bill(self, entry_id: int, date: str, items: Any) -> RegistryEntryRead:
        """Price ``items`` against the catalog and close the entry.

        ``items`` is a sequence of ``BillItemCreate`` or mappings with
        ``productId`` and a positive integer ``quantity``.  An empty
        sequence produces an empty bill with a zero total.  A reference
        to an unknown product aborts the whole operation.
        """
        entry = self._find(self.store.list_entries(), entry_id, date)
        requested = self._parse_items(items)

        products = {p.id: p for p in await self.catalog.list_products()}
        bill_items: List[BillItem] = []
        total = 0.0
        for item in requested:
            product = products.get(item.product_id)
            if product is None:
                raise NotFound(f"Product not found: id={item.product_id}")
            sub_total = product.price * item.quantity
            total += sub_total
            bill_items.append(
                BillItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,
                    sub_total=sub_total,
                )
            )

        updated = entry.model_copy(
            update={
                "bill_items": bill_items,
                "total_price": round_money(total),
                "status": EntryStatus.DONE,
            }
        )
        self.store.update_entry(updated)
        logger.info(
            "Billed entry %s on %s: %d item(s), total %.2f",
            entry_id, date, len(bill_items), updated.total_price,
        )
        return updated

    async def delete_entry(self, entry_id: int, date: str) -> List[RegistryEntryRead]:
        """Delete an entry and its bill; return the remaining entries."""
        entries = self.store.list_entries()
        self._find(entries, entry_id, date)
        self.store.delete_entry(entry_id, date)
        logger.info("Deleted entry %s on %s", entry_id, date)
        return [e for e in entries if not (e.id == entry_id and e.date == date)]

    @staticmethod
    def _find(entries: Iterable[RegistryEntryRead], entry_id: int, date: str) -> RegistryEntryRead:
        for entry in entries:
            if entry.id == entry_id and entry.date == date:
                return entry
        raise NotFound(f"No registry entry found with id={entry_id} on date={date}.")

    @staticmethod
    def _parse_items(items: Any) -> List[BillItemCreate]:
        if items is None or isinstance(items, (str, bytes, dict)):
            raise InvalidArgument('"billItems" must be an array of { productId, quantity }.')
        parsed: List[BillItemCreate] = []
        try:
            for item in items:
                if not isinstance(item, BillItemCreate):
                    item = BillItemCreate.model_validate(item)
                if item.quantity <= 0:
                    raise InvalidArgument(
                        f"Quantity for product {item.product_id} must be a positive integer."
                    )
                parsed.append(item)
        except (TypeError, ValidationError) as exc:
            raise InvalidArgument('"billItems" must be an array of { productId, quantity }.') from exc
        return parsed
