# Test configuration
import os
from datetime import date
from typing import List

import pytest

# Set test environment variables BEFORE importing app modules
os.environ["APP_PASSWORD"] = "test-password"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DEVICE_TOKEN_EXPIRE_DAYS"] = "3"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["STORAGE_BACKEND"] = "json"

from fastapi.testclient import TestClient  # noqa: E402

from registry_pos_api.app.core.db import SQLiteStore  # noqa: E402
from registry_pos_api.app.core.json_store import JsonFileStore  # noqa: E402
from registry_pos_api.app.main import create_app  # noqa: E402
from registry_pos_api.app.schemas.product import ProductRead  # noqa: E402
from registry_pos_api.app.schemas.registry import RegistryEntryRead  # noqa: E402

TEST_PASSWORD = "test-password"
TODAY = date(2024, 1, 1)


class FakeClock:
    """Callable returning a settable "today"."""

    def __init__(self, today: date = TODAY) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


class MemoryStore:
    """In-memory ``Store`` for fast service tests."""

    def __init__(self) -> None:
        self.products: List[ProductRead] = []
        self.entries: List[RegistryEntryRead] = []

    def initialise(self) -> None:
        pass

    def list_products(self) -> List[ProductRead]:
        return list(self.products)

    def add_product(self, product: ProductRead) -> None:
        self.products.append(product)

    def delete_product(self, product_id: int) -> None:
        self.products = [p for p in self.products if p.id != product_id]

    def list_entries(self) -> List[RegistryEntryRead]:
        return list(self.entries)

    def add_entry(self, entry: RegistryEntryRead) -> None:
        self.entries.append(entry)

    def update_entry(self, entry: RegistryEntryRead) -> None:
        self.entries = [
            entry if (e.id == entry.id and e.date == entry.date) else e for e in self.entries
        ]

    def delete_entry(self, entry_id: int, date: str) -> None:
        self.entries = [e for e in self.entries if not (e.id == entry_id and e.date == date)]


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def json_store(tmp_path):
    store = JsonFileStore(tmp_path / "data")
    store.initialise()
    return store


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteStore(tmp_path / "registry.db")
    store.initialise()
    return store


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    """Every API test runs once per storage backend."""
    if request.param == "json":
        return JsonFileStore(tmp_path / "data")
    return SQLiteStore(tmp_path / "registry.db")


@pytest.fixture
def app(store, clock):
    return create_app(store=store, clock=clock)


@pytest.fixture
def anon_client(app):
    """Client whose device has not been unlocked."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(app):
    """Client with an unlocked device cookie."""
    with TestClient(app) as client:
        response = client.post("/api/auth", json={"password": TEST_PASSWORD})
        assert response.status_code == 200
        yield client
