"""Database schema definitions and migration helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

_SCHEMA_VERSION = 1

DEFAULT_DB_PATH = "~/.config/stockscan/stockscan.db"

_DDL = """
CREATE TABLE IF NOT EXISTS inventory (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    gtin14 TEXT NOT NULL,
    gtin13 TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL,
    match_kind TEXT NOT NULL DEFAULT 'NONE',
    batch TEXT NOT NULL DEFAULT '',
    serial TEXT NOT NULL DEFAULT '',
    quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity >= 1),
    expiry_iso TEXT NOT NULL DEFAULT '',
    expiry_ddmmyy TEXT NOT NULL DEFAULT '',
    expiry_display TEXT NOT NULL DEFAULT '',
    raw TEXT NOT NULL DEFAULT '',
    source_code TEXT NOT NULL DEFAULT '',
    needs_review INTEGER NOT NULL DEFAULT 0,
    last_modified TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_inventory_gtin_batch ON inventory(gtin14, batch);
CREATE INDEX IF NOT EXISTS idx_inventory_modified ON inventory(last_modified);

CREATE TABLE IF NOT EXISTS catalog (
    barcode TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_catalog_name ON catalog(name);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the database and ensure the schema is up to date.

    Inventory and catalog share one file, so both tables are created here.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        An open sqlite3.Connection with the schema applied.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")

    try:
        row = conn.execute("SELECT version FROM schema_version").fetchone()
        current_version = row["version"] if row else 0
    except sqlite3.OperationalError:
        current_version = 0

    if current_version < _SCHEMA_VERSION:
        conn.executescript(_DDL)
        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (_SCHEMA_VERSION,),
        )
        conn.commit()

    return conn
