"""Reference catalog storage keyed by barcode."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path

from ..catalog.models import CatalogEntry
from .schema import DEFAULT_DB_PATH, ensure_schema

_UPSERT = "INSERT OR REPLACE INTO catalog (barcode, name) VALUES (?, ?)"


def write_catalog(conn: sqlite3.Connection, entries: Iterable[CatalogEntry]) -> int:
    """Clear the catalog table and write ``entries``. Does not commit."""
    conn.execute("DELETE FROM catalog")
    count = 0
    for entry in entries:
        conn.execute(_UPSERT, (entry.barcode, entry.name or ""))
        count += 1
    return count


class CatalogDB:
    """Manages the catalog table. ``put`` is last-write-wins per barcode."""

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

    def put(self, entry: CatalogEntry) -> None:
        conn = self._get_conn()
        conn.execute(_UPSERT, (entry.barcode, entry.name or ""))
        conn.commit()

    def put_many(self, entries: Iterable[CatalogEntry]) -> int:
        """Upsert entries in one transaction. Returns the number written."""
        conn = self._get_conn()
        count = 0
        with conn:
            for entry in entries:
                conn.execute(_UPSERT, (entry.barcode, entry.name or ""))
                count += 1
        return count

    def replace_all(self, entries: Iterable[CatalogEntry]) -> int:
        """Atomically clear the catalog and write ``entries``."""
        conn = self._get_conn()
        with conn:
            return write_catalog(conn, entries)

    def clear(self) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM catalog")
        conn.commit()

    def get(self, barcode: str) -> CatalogEntry | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT barcode, name FROM catalog WHERE barcode = ?", (barcode,)
        ).fetchone()
        return CatalogEntry(row["barcode"], row["name"]) if row else None

    def list_all(self) -> list[CatalogEntry]:
        """Return all entries ordered by barcode."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT barcode, name FROM catalog ORDER BY barcode"
        ).fetchall()
        return [CatalogEntry(r["barcode"], r["name"]) for r in rows]

    def count(self) -> int:
        conn = self._get_conn()
        return conn.execute("SELECT COUNT(*) FROM catalog").fetchone()[0]
