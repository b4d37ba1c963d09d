"""
Flat-file storage.

``JsonFileStore`` keeps the catalog in ``products.json`` and the
registry in ``registry.json``, both pretty-printed JSON arrays using the
camelCase field names of the API.  Each operation reads the whole file,
changes the list in memory and writes it back.  Writes go to a temporary
file first and are moved into place so a crash never leaves a half
written file behind.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from .errors import StorageFailure
from ..schemas.product import ProductRead
from ..schemas.registry import RegistryEntryRead

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
REGISTRY_FILE = "registry.json"


class JsonFileStore:
    """``Store`` backed by two JSON files in ``data_dir``."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self.products_file = self.data_dir / PRODUCTS_FILE
        self.registry_file = self.data_dir / REGISTRY_FILE

    def initialise(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for path in (self.products_file, self.registry_file):
                if not path.exists():
                    self._write(path, [])
        except OSError as exc:
            logger.exception("Cannot initialise data directory %s", self.data_dir)
            raise StorageFailure(f"Cannot initialise {self.data_dir}: {exc}") from exc

    # Products

    def list_products(self) -> List[ProductRead]:
        raw = self._read(self.products_file)
        try:
            return [ProductRead.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise StorageFailure(f"Malformed {self.products_file}: {exc}") from exc

    def add_product(self, product: ProductRead) -> None:
        products = self.list_products()
        products.append(product)
        self._write_models(self.products_file, products)

    def delete_product(self, product_id: int) -> None:
        products = [p for p in self.list_products() if p.id != product_id]
        self._write_models(self.products_file, products)

    # Registry entries

    def list_entries(self) -> List[RegistryEntryRead]:
        raw = self._read(self.registry_file)
        try:
            return [RegistryEntryRead.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise StorageFailure(f"Malformed {self.registry_file}: {exc}") from exc

    def add_entry(self, entry: RegistryEntryRead) -> None:
        entries = self.list_entries()
        entries.append(entry)
        self._write_models(self.registry_file, entries)

    def update_entry(self, entry: RegistryEntryRead) -> None:
        entries = [
            entry if (e.id == entry.id and e.date == entry.date) else e
            for e in self.list_entries()
        ]
        self._write_models(self.registry_file, entries)

    def delete_entry(self, entry_id: int, date: str) -> None:
        entries = [
            e for e in self.list_entries() if not (e.id == entry_id and e.date == date)
        ]
        self._write_models(self.registry_file, entries)

    # File helpers

    def _read(self, path: Path) -> List[Any]:
        """Load a JSON array; a missing file is an empty collection."""
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Error reading %s", path)
            raise StorageFailure(f"Error reading {path}: {exc}") from exc
        if not isinstance(data, list):
            raise StorageFailure(f"Malformed {path}: expected a JSON array")
        return data

    def _write_models(self, path: Path, models: List[Any]) -> None:
        self._write(path, [m.model_dump(by_alias=True, mode="json") for m in models])

    def _write(self, path: Path, data: List[Any]) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.exception("Error writing %s", path)
            raise StorageFailure(f"Error writing {path}: {exc}") from exc
