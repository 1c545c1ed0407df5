"""SQLite storage for inventory records and the reference catalog."""

from .catalog import CatalogDB
from .inventory import InventoryDB
from .schema import ensure_schema

__all__ = [
    "CatalogDB",
    "InventoryDB",
    "ensure_schema",
]
