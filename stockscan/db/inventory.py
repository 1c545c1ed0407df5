"""Inventory record CRUD operations."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path

from ..catalog.models import CatalogEntry
from ..inventory import InventoryRecord
from .catalog import write_catalog
from .schema import DEFAULT_DB_PATH, ensure_schema

_COLUMNS = (
    "gtin14",
    "gtin13",
    "name",
    "match_kind",
    "batch",
    "serial",
    "quantity",
    "expiry_iso",
    "expiry_ddmmyy",
    "expiry_display",
    "raw",
    "source_code",
    "needs_review",
    "last_modified",
)

_INSERT = (
    f"INSERT INTO inventory ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)
_UPDATE = (
    f"UPDATE inventory SET {', '.join(f'{c} = ?' for c in _COLUMNS)} WHERE id = ?"
)


def _values(record: InventoryRecord) -> tuple:
    return (
        record.gtin14,
        record.gtin13,
        record.name,
        record.match_kind,
        record.batch or "",
        record.serial or "",
        max(int(record.quantity or 1), 1),
        record.expiry_iso or "",
        record.expiry_ddmmyy or "",
        record.expiry_display or "",
        record.raw or "",
        record.source_code or "",
        1 if record.needs_review else 0,
        record.last_modified,
    )


def write_inventory(conn: sqlite3.Connection, records: Iterable[InventoryRecord]) -> int:
    """Clear the inventory table and insert ``records``. Does not commit."""
    conn.execute("DELETE FROM inventory")
    count = 0
    for record in records:
        conn.execute(_INSERT, _values(record))
        count += 1
    return count


def _row_to_record(row: sqlite3.Row) -> InventoryRecord:
    data = dict(row)
    data["needs_review"] = bool(data["needs_review"])
    return InventoryRecord.from_dict(data)


class InventoryDB:
    """Manages the inventory table."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def add(self, record: InventoryRecord) -> int:
        """Insert a record and return its new ID.

        ``record.id`` is ignored; the database assigns a fresh one.
        """
        conn = self._get_conn()
        cur = conn.execute(_INSERT, _values(record))
        conn.commit()
        return cur.lastrowid

    def update(self, record: InventoryRecord) -> None:
        """Overwrite every field of an existing record.

        Raises:
            KeyError: If no record with ``record.id`` exists.
        """
        conn = self._get_conn()
        cur = conn.execute(_UPDATE, (*_values(record), record.id))
        conn.commit()
        if cur.rowcount == 0:
            raise KeyError(f"Inventory record not found: {record.id}")

    def get(self, item_id: int) -> InventoryRecord | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM inventory WHERE id = ?", (item_id,)
        ).fetchone()
        return _row_to_record(row) if row else None

    def delete(self, item_id: int) -> bool:
        """Delete a record by ID. Returns False if it did not exist."""
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM inventory WHERE id = ?", (item_id,))
        conn.commit()
        return cur.rowcount > 0

    def list_all(self) -> list[InventoryRecord]:
        """Return every record, most recently modified first."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM inventory ORDER BY last_modified DESC, id DESC"
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def find_by_gtin_batch(self, gtin14: str, batch: str) -> InventoryRecord | None:
        """Return the record for an exact (gtin14, batch) pair, if any."""
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM inventory WHERE gtin14 = ? AND batch = ? ORDER BY id LIMIT 1",
            (gtin14, batch or ""),
        ).fetchone()
        return _row_to_record(row) if row else None

    def count(self) -> int:
        conn = self._get_conn()
        return conn.execute("SELECT COUNT(*) FROM inventory").fetchone()[0]

    def clear(self) -> int:
        """Delete all records. Returns the number removed."""
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM inventory")
        conn.commit()
        return cur.rowcount

    def replace_all(
        self,
        records: Iterable[InventoryRecord],
        catalog: Iterable[CatalogEntry] | None = None,
    ) -> int:
        """Atomically replace all records; every record gets a fresh ID.

        When ``catalog`` is given the catalog table is replaced in the same
        transaction, so a failure leaves both tables as they were.
        """
        conn = self._get_conn()
        with conn:
            count = write_inventory(conn, records)
            if catalog is not None:
                write_catalog(conn, catalog)
        return count
