"""JSON backup and restore documents for inventory and catalog."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .catalog.models import CatalogEntry
from .gs1.decoder import parse_quantity
from .inventory import InventoryRecord

FORMAT_VERSION = "1"


class BackupFormatError(ValueError):
    """The backup document is not valid JSON or has the wrong shape."""


@dataclass
class Backup:
    format_version: str = FORMAT_VERSION
    timestamp: int = 0  # epoch milliseconds
    inventory: list[InventoryRecord] = field(default_factory=list)
    catalog: list[CatalogEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "formatVersion": self.format_version,
            "timestamp": self.timestamp,
            "inventory": [r.to_dict() for r in self.inventory],
            "catalog": [e.to_dict() for e in self.catalog],
        }


def build_backup(
    inventory: Iterable[InventoryRecord],
    catalog: Iterable[CatalogEntry],
    now: datetime | None = None,
) -> Backup:
    now = now or datetime.now()
    return Backup(
        timestamp=int(now.timestamp() * 1000),
        inventory=list(inventory),
        catalog=list(catalog),
    )


def dump_backup(backup: Backup) -> str:
    return json.dumps(backup.to_dict(), ensure_ascii=False, indent=2)


def _parse_inventory(items: list) -> list[InventoryRecord]:
    records = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("gtin14"):
            raise BackupFormatError(f"inventory[{i}] is not a valid record")
        data = dict(item)
        # Identities are reassigned by storage on restore
        data.pop("id", None)
        data.setdefault("name", "")
        data["quantity"] = parse_quantity(data.get("quantity"))
        records.append(InventoryRecord.from_dict(data))
    return records


def _parse_catalog(items: list) -> list[CatalogEntry]:
    entries = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("barcode"):
            raise BackupFormatError(f"catalog[{i}] is not a valid entry")
        name = item.get("name") or item.get("productName") or ""
        entries.append(CatalogEntry(barcode=str(item["barcode"]), name=str(name)))
    return entries


def parse_backup(doc: object) -> Backup:
    """Validate a decoded backup document.

    Raises:
        BackupFormatError: If the document shape is wrong.
    """
    if not isinstance(doc, dict):
        raise BackupFormatError("Backup must be a JSON object")
    inventory = doc.get("inventory")
    catalog = doc.get("catalog")
    if not isinstance(inventory, list) or not isinstance(catalog, list):
        raise BackupFormatError("Backup must contain 'inventory' and 'catalog' lists")

    try:
        timestamp = int(doc.get("timestamp") or 0)
    except (TypeError, ValueError) as e:
        raise BackupFormatError(
            f"Invalid backup timestamp: {doc.get('timestamp')!r}"
        ) from e

    return Backup(
        format_version=str(doc.get("formatVersion", FORMAT_VERSION)),
        timestamp=timestamp,
        inventory=_parse_inventory(inventory),
        catalog=_parse_catalog(catalog),
    )


def load_backup(text: str) -> Backup:
    """Parse a JSON backup string.

    Raises:
        BackupFormatError: If the text is not valid JSON or has the wrong shape.
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}") from e
    return parse_backup(doc)
