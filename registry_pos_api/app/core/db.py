"""
SQLite database integration and simple migration system.

``SQLiteStore`` implements the ``Store`` interface on top of an
embedded SQLite file.  A new connection is opened per operation and
closed when the operation finishes; writes that touch several tables
(an entry and its bill items) run in one transaction.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  To change
the schema, append a migration with an incremented version number.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List

from .errors import StorageFailure
from ..schemas.product import ProductRead
from ..schemas.registry import BillItem, EntryStatus, RegistryEntryRead

logger = logging.getLogger(__name__)

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            price REAL NOT NULL
        );

        -- ``seq`` preserves insertion order; entries are addressed by (id, date).
        CREATE TABLE IF NOT EXISTS registry_entries (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id INTEGER NOT NULL,
            date TEXT NOT NULL,
            name TEXT NOT NULL,
            number TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            total_price REAL NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (id, date)
        );

        CREATE TABLE IF NOT EXISTS bill_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_seq INTEGER NOT NULL,
            line_index INTEGER NOT NULL,
            product_id INTEGER NOT NULL,
            product_name TEXT NOT NULL,
            quantity INTEGER NOT NULL,
            unit_price REAL NOT NULL,
            sub_total REAL NOT NULL,
            FOREIGN KEY(entry_seq) REFERENCES registry_entries(seq) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: lookups by day and by entry
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_registry_entries_date ON registry_entries(date);
        CREATE INDEX IF NOT EXISTS idx_bill_items_entry ON bill_items(entry_seq, line_index);
        """,
    ),
]


class SQLiteStore:
    """``Store`` backed by a single SQLite database file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_connection(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be read by
        name.  Foreign keys are enabled per connection, otherwise
        deleting an entry would leave its bill items behind.
        """
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, commit on success and always close the connection.

        Any ``sqlite3.Error`` is rolled back and re-raised as
        ``StorageFailure``.
        """
        try:
            conn = self.get_connection()
        except sqlite3.Error as exc:
            logger.exception("Cannot open database %s", self.path)
            raise StorageFailure(f"Cannot open database {self.path}: {exc}") from exc
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Database operation failed")
            raise StorageFailure(f"Database operation failed: {exc}") from exc
        finally:
            conn.close()

    def initialise(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailure(f"Cannot create {self.path.parent}: {exc}") from exc

        with self.get_cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    logger.info("Applied migration %s", version)
                    current_version = version

    # Products

    def list_products(self) -> List[ProductRead]:
        with self.get_cursor() as cursor:
            rows = cursor.execute("SELECT id, name, price FROM products ORDER BY id").fetchall()
        return [ProductRead(id=row["id"], name=row["name"], price=row["price"]) for row in rows]

    def add_product(self, product: ProductRead) -> None:
        with self.get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO products (id, name, price) VALUES (?, ?, ?)",
                (product.id, product.name, product.price),
            )

    def delete_product(self, product_id: int) -> None:
        with self.get_cursor() as cursor:
            cursor.execute("DELETE FROM products WHERE id = ?", (product_id,))

    # Registry entries

    def list_entries(self) -> List[RegistryEntryRead]:
        with self.get_cursor() as cursor:
            entry_rows = cursor.execute(
                "SELECT * FROM registry_entries ORDER BY seq"
            ).fetchall()
            item_rows = cursor.execute(
                "SELECT * FROM bill_items ORDER BY entry_seq, line_index"
            ).fetchall()

        items_by_entry: Dict[int, List[BillItem]] = {}
        for row in item_rows:
            items_by_entry.setdefault(row["entry_seq"], []).append(
                BillItem(
                    product_id=row["product_id"],
                    product_name=row["product_name"],
                    quantity=row["quantity"],
                    unit_price=row["unit_price"],
                    sub_total=row["sub_total"],
                )
            )
        return [
            RegistryEntryRead(
                id=row["id"],
                name=row["name"],
                number=row["number"],
                date=row["date"],
                status=EntryStatus(row["status"]),
                bill_items=items_by_entry.get(row["seq"], []),
                total_price=row["total_price"],
            )
            for row in entry_rows
        ]

    def add_entry(self, entry: RegistryEntryRead) -> None:
        with self.get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO registry_entries (id, date, name, number, status, total_price)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.date,
                    entry.name,
                    entry.number,
                    entry.status.value,
                    entry.total_price,
                ),
            )
            self._insert_bill_items(cursor, cursor.lastrowid, entry.bill_items)

    def update_entry(self, entry: RegistryEntryRead) -> None:
        with self.get_cursor() as cursor:
            row = cursor.execute(
                "SELECT seq FROM registry_entries WHERE id = ? AND date = ?",
                (entry.id, entry.date),
            ).fetchone()
            if row is None:
                return
            seq = row["seq"]
            cursor.execute(
                "UPDATE registry_entries SET status = ?, total_price = ? WHERE seq = ?",
                (entry.status.value, entry.total_price, seq),
            )
            cursor.execute("DELETE FROM bill_items WHERE entry_seq = ?", (seq,))
            self._insert_bill_items(cursor, seq, entry.bill_items)

    def delete_entry(self, entry_id: int, date: str) -> None:
        with self.get_cursor() as cursor:
            cursor.execute(
                "DELETE FROM registry_entries WHERE id = ? AND date = ?",
                (entry_id, date),
            )

    @staticmethod
    def _insert_bill_items(cursor: sqlite3.Cursor, entry_seq: int, items: List[BillItem]) -> None:
        for idx, item in enumerate(items):
            cursor.execute(
                """
                INSERT INTO bill_items
                    (entry_seq, line_index, product_id, product_name, quantity, unit_price, sub_total)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry_seq,
                    idx,
                    item.product_id,
                    item.product_name,
                    item.quantity,
                    item.unit_price,
                    item.sub_total,
                ),
            )
