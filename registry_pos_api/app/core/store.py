"""
Storage interface shared by the service layer.

Services receive a ``Store`` instead of opening connections themselves,
which keeps the catalog and registry logic independent of where the
data lives.  Two implementations ship with the application:

* ``SQLiteStore`` (``core.db``) keeps products, entries and bill items
  in relational tables.
* ``JsonFileStore`` (``core.json_store``) keeps ``products.json`` and
  ``registry.json`` flat files, the layout used by the first version of
  the registry.

Every method either completes or raises ``StorageFailure``.  Stores do
not validate business rules; callers check existence and state before
writing.
"""

import logging
import os
from pathlib import Path
from typing import List, Protocol

from .config import Settings
from ..schemas.product import ProductRead
from ..schemas.registry import RegistryEntryRead

logger = logging.getLogger(__name__)


class Store(Protocol):
    def initialise(self) -> None:
        """Create files or tables on first use."""

    def list_products(self) -> List[ProductRead]:
        """Return products in insertion order."""

    def add_product(self, product: ProductRead) -> None:
        ...

    def delete_product(self, product_id: int) -> None:
        ...

    def list_entries(self) -> List[RegistryEntryRead]:
        """Return registry entries, bill items included, in insertion order."""

    def add_entry(self, entry: RegistryEntryRead) -> None:
        ...

    def update_entry(self, entry: RegistryEntryRead) -> None:
        """Overwrite status, bill items and total of the entry with the same ``(id, date)``."""

    def delete_entry(self, entry_id: int, date: str) -> None:
        """Remove the entry and its bill items."""


def resolve_path(value: str) -> Path:
    """Resolve a configured path.

    Absolute paths are used as is; relative ones are taken relative to
    the current working directory, which is where ``run.py`` and uvicorn
    are started from.
    """
    if os.path.isabs(value):
        return Path(value)
    return (Path.cwd() / value).resolve()


def create_store(settings: Settings) -> Store:
    """Build the store selected by ``settings.storage_backend``."""
    backend = settings.storage_backend.lower()
    if backend == "sqlite":
        from .db import SQLiteStore

        path = resolve_path(settings.database_url)
        logger.info("Using SQLite store at %s", path)
        return SQLiteStore(path)
    if backend == "json":
        from .json_store import JsonFileStore

        path = resolve_path(settings.data_dir)
        logger.info("Using JSON file store in %s", path)
        return JsonFileStore(path)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")
