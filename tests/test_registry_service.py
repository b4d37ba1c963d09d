"""
Tests for the registry service.

Covers daily id allocation, the status lifecycle, bill computation and
the board filters.
"""

import random
from datetime import date

import pytest
import pytest_asyncio

from registry_pos_api.app.core.errors import (
    InvalidArgument,
    InvalidState,
    NotFound,
    ResourceExhausted,
)
from registry_pos_api.app.schemas.registry import (
    BillItemCreate,
    EntryStatus,
    RegistryEntryRead,
)
from registry_pos_api.app.services.product_service import ProductService
from registry_pos_api.app.services.registry_service import (
    DAILY_ID_CAPACITY,
    MAX_ENTRY_ID,
    MIN_ENTRY_ID,
    RegistryService,
    round_money,
)


@pytest.fixture
def catalog(memory_store):
    return ProductService(memory_store)


@pytest.fixture
def service(memory_store, catalog, clock):
    return RegistryService(memory_store, catalog, clock=clock, rng=random.Random(1234))


@pytest_asyncio.fixture
async def coffee_and_tea(catalog):
    await catalog.add_product("Coffee", 2.50)
    await catalog.add_product("Tea", 1.75)


def _entry(entry_id, day, status=EntryStatus.PENDING):
    return RegistryEntryRead(id=entry_id, name="x", number="1", date=day, status=status)


class TestCreateEntry:
    """Registering customers."""

    @pytest.mark.asyncio
    async def test_new_entry_is_pending_for_today(self, service):
        entry = await service.create_entry("Alice", "555")
        assert entry.status == EntryStatus.PENDING
        assert entry.date == "2024-01-01"
        assert entry.bill_items == []
        assert entry.total_price == 0
        assert MIN_ENTRY_ID <= entry.id <= MAX_ENTRY_ID

    @pytest.mark.asyncio
    async def test_fields_are_trimmed(self, service):
        entry = await service.create_entry("  Alice ", " 555 ")
        assert entry.name == "Alice"
        assert entry.number == "555"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,number", [("", "555"), ("Alice", "  "), (None, "555"), ("Alice", 555)])
    async def test_invalid_fields_rejected(self, service, memory_store, name, number):
        with pytest.raises(InvalidArgument):
            await service.create_entry(name, number)
        assert memory_store.entries == []

    @pytest.mark.asyncio
    async def test_same_day_ids_are_distinct_and_in_range(self, service):
        ids = [(await service.create_entry(f"c{i}", "1")).id for i in range(200)]
        assert len(set(ids)) == len(ids)
        assert all(MIN_ENTRY_ID <= i <= MAX_ENTRY_ID for i in ids)

    @pytest.mark.asyncio
    async def test_last_free_id_is_found(self, service, memory_store):
        memory_store.entries = [_entry(i, "2024-01-01") for i in range(MIN_ENTRY_ID, MAX_ENTRY_ID)]
        entry = await service.create_entry("Last", "1")
        assert entry.id == MAX_ENTRY_ID

    @pytest.mark.asyncio
    async def test_exhausted_day_fails(self, service, memory_store):
        memory_store.entries = [
            _entry(i, "2024-01-01") for i in range(MIN_ENTRY_ID, MAX_ENTRY_ID + 1)
        ]
        assert len(memory_store.entries) == DAILY_ID_CAPACITY
        with pytest.raises(ResourceExhausted):
            await service.create_entry("Too many", "1")
        assert len(memory_store.entries) == DAILY_ID_CAPACITY

    @pytest.mark.asyncio
    async def test_602nd_creation_on_a_day_fails(self, service):
        for i in range(DAILY_ID_CAPACITY):
            await service.create_entry(f"c{i}", "1")
        with pytest.raises(ResourceExhausted):
            await service.create_entry("one more", "1")

    @pytest.mark.asyncio
    async def test_other_days_do_not_count_towards_capacity(self, service, memory_store):
        memory_store.entries = [
            _entry(i, "2023-12-31") for i in range(MIN_ENTRY_ID, MAX_ENTRY_ID + 1)
        ]
        entry = await service.create_entry("New day", "1")
        assert entry.date == "2024-01-01"


class TestHoldEntry:
    """Putting entries on hold."""

    @pytest.mark.asyncio
    async def test_hold_pending_entry(self, service):
        entry = await service.create_entry("Alice", "555")
        held = await service.hold_entry(entry.id, entry.date)
        assert held.status == EntryStatus.ON_HOLD
        assert (await service.get_entry(entry.id, entry.date)).status == EntryStatus.ON_HOLD

    @pytest.mark.asyncio
    async def test_hold_done_entry_fails_and_leaves_it_unchanged(self, service, coffee_and_tea):
        entry = await service.create_entry("Alice", "555")
        done = await service.create_bill(entry.id, entry.date, [{"productId": 1, "quantity": 1}])
        with pytest.raises(InvalidState):
            await service.hold_entry(entry.id, entry.date)
        assert await service.get_entry(entry.id, entry.date) == done

    @pytest.mark.asyncio
    async def test_hold_requires_matching_date(self, service):
        entry = await service.create_entry("Alice", "555")
        with pytest.raises(NotFound):
            await service.hold_entry(entry.id, "2023-12-31")


class TestCreateBill:
    """Billing entries against the catalog."""

    @pytest.mark.asyncio
    async def test_coffee_and_tea_bill(self, service, coffee_and_tea):
        entry = await service.create_entry("Alice", "555")
        billed = await service.create_bill(
            entry.id,
            "2024-01-01",
            [{"productId": 1, "quantity": 2}, {"productId": 2, "quantity": 1}],
        )
        assert billed.status == EntryStatus.DONE
        assert billed.total_price == 6.75
        items = [item.model_dump(by_alias=True) for item in billed.bill_items]
        assert items == [
            {"productId": 1, "productName": "Coffee", "quantity": 2, "unitPrice": 2.50, "subTotal": 5.00},
            {"productId": 2, "productName": "Tea", "quantity": 1, "unitPrice": 1.75, "subTotal": 1.75},
        ]

    @pytest.mark.asyncio
    async def test_hold_then_bill_matches_bill_from_pending(self, service, coffee_and_tea):
        items = [BillItemCreate(product_id=1, quantity=2), BillItemCreate(product_id=2, quantity=1)]
        direct = await service.create_entry("Alice", "555")
        held = await service.create_entry("Bob", "556")
        await service.hold_entry(held.id, held.date)

        direct_bill = await service.create_bill(direct.id, direct.date, items)
        held_bill = await service.create_bill(held.id, held.date, items)

        assert held_bill.status == direct_bill.status == EntryStatus.DONE
        assert held_bill.bill_items == direct_bill.bill_items
        assert held_bill.total_price == direct_bill.total_price

    @pytest.mark.asyncio
    async def test_total_is_rounded_sum_of_subtotals(self, service, catalog):
        await catalog.add_product("Odd", 0.1)
        await catalog.add_product("Odder", 0.335)
        entry = await service.create_entry("Alice", "555")
        billed = await service.create_bill(
            entry.id, entry.date, [{"productId": 1, "quantity": 3}, {"productId": 2, "quantity": 1}]
        )
        assert billed.total_price == round_money(sum(i.sub_total for i in billed.bill_items))

    @pytest.mark.asyncio
    async def test_bill_snapshots_product(self, service, catalog, coffee_and_tea):
        entry = await service.create_entry("Alice", "555")
        await service.create_bill(entry.id, entry.date, [{"productId": 1, "quantity": 1}])
        await catalog.delete_product(1)
        stored = await service.get_entry(entry.id, entry.date)
        assert stored.bill_items[0].product_name == "Coffee"
        assert stored.bill_items[0].unit_price == 2.5

    @pytest.mark.asyncio
    async def test_empty_bill_closes_entry_with_zero_total(self, service):
        entry = await service.create_entry("Alice", "555")
        billed = await service.create_bill(entry.id, entry.date, [])
        assert billed.status == EntryStatus.DONE
        assert billed.total_price == 0

    @pytest.mark.asyncio
    async def test_unknown_product_aborts_without_changes(self, service, coffee_and_tea):
        entry = await service.create_entry("Alice", "555")
        with pytest.raises(NotFound):
            await service.create_bill(
                entry.id, entry.date, [{"productId": 1, "quantity": 1}, {"productId": 99, "quantity": 1}]
            )
        assert await service.get_entry(entry.id, entry.date) == entry

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "items",
        [
            None,
            "nope",
            [{"productId": 1}],
            [{"quantity": 1}],
            [{"productId": 1, "quantity": 0}],
            [{"productId": 1, "quantity": -2}],
            [{"productId": 1, "quantity": 1.5}],
            [{"productId": "1", "quantity": 1}],
            [42],
        ],
    )
    async def test_malformed_items_rejected(self, service, coffee_and_tea, items):
        entry = await service.create_entry("Alice", "555")
        with pytest.raises(InvalidArgument):
            await service.create_bill(entry.id, entry.date, items)
        assert await service.get_entry(entry.id, entry.date) == entry

    @pytest.mark.asyncio
    async def test_missing_entry(self, service, coffee_and_tea):
        with pytest.raises(NotFound):
            await service.create_bill(123, "2024-01-01", [{"productId": 1, "quantity": 1}])


class TestDeleteEntry:
    """Deleting entries."""

    @pytest.mark.asyncio
    async def test_delete_returns_remaining(self, service):
        first = await service.create_entry("Alice", "555")
        second = await service.create_entry("Bob", "556")
        remaining = await service.delete_entry(first.id, first.date)
        assert remaining == [second]

    @pytest.mark.asyncio
    async def test_delete_done_entry(self, service, coffee_and_tea):
        entry = await service.create_entry("Alice", "555")
        await service.create_bill(entry.id, entry.date, [{"productId": 1, "quantity": 1}])
        assert await service.delete_entry(entry.id, entry.date) == []

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, service):
        with pytest.raises(NotFound):
            await service.delete_entry(100, "2024-01-01")


class TestListEntries:
    """Board filters."""

    @pytest.mark.asyncio
    async def test_empty_store(self, service):
        assert await service.list_entries() == []
        assert await service.list_entries("done") == []

    @pytest.mark.asyncio
    async def test_pending_and_done_views_for_today(self, service, coffee_and_tea):
        done = await service.create_entry("Alice", "555")
        done = await service.create_bill(done.id, done.date, [{"productId": 1, "quantity": 1}])
        pending = await service.create_entry("Bob", "556")

        assert await service.list_entries("pending") == [pending]
        assert await service.list_entries() == [pending]
        assert await service.list_entries("done") == [done, pending]

    @pytest.mark.asyncio
    async def test_on_hold_entries_are_in_pending_view(self, service):
        entry = await service.create_entry("Alice", "555")
        held = await service.hold_entry(entry.id, entry.date)
        assert await service.list_entries() == [held]

    @pytest.mark.asyncio
    async def test_stale_unfinished_entries_drop_out_once_a_newer_day_exists(self, service, clock):
        # Observed behavior: the board only looks at the latest date.
        yesterday = await service.create_entry("Alice", "555")
        assert await service.list_entries() == [yesterday]

        clock.today = date(2024, 1, 2)
        today = await service.create_entry("Bob", "556")

        assert await service.list_entries() == [today]
        assert await service.list_entries("done") == [today]

    @pytest.mark.asyncio
    async def test_done_view_keeps_older_done_entries(self, service, clock, coffee_and_tea):
        old = await service.create_entry("Alice", "555")
        old = await service.create_bill(old.id, old.date, [{"productId": 2, "quantity": 2}])

        clock.today = date(2024, 1, 2)
        new = await service.create_entry("Bob", "556")

        assert await service.list_entries("done") == [old, new]
        assert await service.list_entries() == [new]


def test_round_money_rounds_halves_up():
    assert round_money(2.675) == 2.68
    assert round_money(0.125) == 0.13
    assert round_money(6.75) == 6.75
