"""Build lookup structures over a catalog snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ..gs1.decoder import digits_only, pad_gtin14
from .models import CatalogEntry

logger = logging.getLogger(__name__)

# Catalog records from older imports and backups name this field differently
NAME_FIELDS = ("name", "productName", "product_name", "description")

LAST8 = 8


@dataclass
class CatalogIndex:
    """Immutable-by-convention lookup tables for one catalog snapshot.

    Attributes:
        exact: normalized barcode (raw digits, GTIN-14, GTIN-13) -> name.
        last8: trailing 8 digits -> entries sharing them, in catalog order.
        entries: every accepted entry, in catalog order.
    """

    exact: dict[str, str] = field(default_factory=dict)
    last8: dict[str, list[CatalogEntry]] = field(default_factory=dict)
    entries: list[CatalogEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


def _field(item: object, key: str) -> object:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def _entry_name(item: object) -> str:
    for key in NAME_FIELDS:
        value = _field(item, key)
        if value:
            return str(value).strip()
    return ""


def build_index(items: Iterable[CatalogEntry | Mapping]) -> CatalogIndex:
    """Build a fresh :class:`CatalogIndex` from catalog records.

    Records without a usable barcode or name are skipped. Later records
    overwrite earlier ones in ``exact``; ``last8`` buckets accumulate.
    """
    index = CatalogIndex()
    skipped = 0

    for item in items:
        barcode = digits_only(_field(item, "barcode"))
        name = _entry_name(item)
        if not barcode or not name:
            skipped += 1
            continue

        index.exact[barcode] = name
        gtin14 = pad_gtin14(barcode)
        index.exact[gtin14] = name
        if gtin14.startswith("0"):
            index.exact[gtin14[1:]] = name

        entry = CatalogEntry(barcode=barcode, name=name)
        if len(barcode) >= LAST8:
            index.last8.setdefault(barcode[-LAST8:], []).append(entry)
        index.entries.append(entry)

    logger.debug(
        "Catalog index built: %d entries, %d skipped, %d last-8 buckets",
        len(index.entries),
        skipped,
        len(index.last8),
    )
    return index
