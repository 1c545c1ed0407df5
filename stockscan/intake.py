"""Stock intake: decode -> match -> merge -> persist, plus catalog upkeep."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .backup import Backup, build_backup
from .catalog.ingest import parse_catalog_text
from .catalog.matcher import MatchKind, MatchResult, ProductMatcher
from .catalog.models import CatalogEntry
from .config import StockScanConfig
from .db.catalog import CatalogDB
from .db.inventory import InventoryDB
from .gs1.decoder import (
    GTIN_LENGTH,
    decode,
    digits_only,
    gtin13_from_gtin14,
    pad_gtin14,
    parse_quantity,
)
from .gs1.models import DecodedRecord
from .inventory import (
    CREATED,
    MERGED,
    InventoryRecord,
    filter_records,
    inventory_stats,
    resolve_merge,
    timestamp,
)

logger = logging.getLogger(__name__)

REJECTED = "rejected"
ERROR = "error"

_LINE_BREAKS = re.compile(r"[\r\n]+")


@dataclass
class ScanResult:
    """What happened to one scanned code."""

    status: str  # created / merged / rejected / error
    code: str
    decoded: DecodedRecord | None = None
    match: MatchResult | None = None
    record: InventoryRecord | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (CREATED, MERGED)

    @property
    def needs_review(self) -> bool:
        return bool(self.record and self.record.needs_review)


@dataclass
class BatchSummary:
    processed: int = 0
    errors: int = 0
    results: list[ScanResult] = field(default_factory=list)


class StockIntake:
    """Ties the decoder, matcher and merge resolver to the two stores.

    The matcher's index is rebuilt from the catalog store after every
    catalog mutation made through this class.
    """

    def __init__(
        self,
        inventory: InventoryDB,
        catalog: CatalogDB,
        config: StockScanConfig | None = None,
    ) -> None:
        self._config = config or StockScanConfig()
        self._inventory = inventory
        self._catalog = catalog
        self._matcher = ProductMatcher(
            ambiguous=self._config.matching.ambiguous_last8
        )
        self.rebuild_index()

    @classmethod
    def from_config(cls, config: StockScanConfig) -> StockIntake:
        return cls(
            InventoryDB(config.database.path),
            CatalogDB(config.database.path),
            config,
        )

    def close(self) -> None:
        self._inventory.close()
        self._catalog.close()

    @property
    def matcher(self) -> ProductMatcher:
        return self._matcher

    @property
    def inventory(self) -> InventoryDB:
        return self._inventory

    @property
    def catalog(self) -> CatalogDB:
        return self._catalog

    def rebuild_index(self) -> None:
        self._matcher.rebuild(self._catalog.list_all())

    # --- scanning -------------------------------------------------------------

    def lookup(self, code: str) -> tuple[DecodedRecord, MatchResult]:
        """Decode and match a code without touching inventory."""
        decoded = self._decode(code)
        return decoded, self._matcher.match_decoded(decoded)

    def _decode(self, code: str) -> DecodedRecord:
        decoded = decode(code)
        if decoded.has_gtin:
            return decoded

        # Short numeric codes that the decoder's plain mode rejects
        digits = digits_only(code)
        if self._config.intake.short_code_min_digits <= len(digits) <= GTIN_LENGTH:
            decoded.gtin14 = pad_gtin14(digits)
            decoded.gtin13 = gtin13_from_gtin14(decoded.gtin14)
        return decoded

    def process_scan(self, code: str, now: datetime | None = None) -> ScanResult:
        """Record one scanned code in inventory.

        Returns a ``rejected`` result (and writes nothing) when no GTIN can
        be obtained. Storage errors propagate.
        """
        code = (code or "").strip()
        if not code:
            return ScanResult(status=REJECTED, code=code, message="No barcode data")

        decoded, match = self.lookup(code)
        if not decoded.has_gtin:
            logger.warning("Rejected scan %r: no usable GTIN", code)
            return ScanResult(
                status=REJECTED,
                code=code,
                decoded=decoded,
                message="Invalid barcode format",
            )

        decision = resolve_merge(
            decoded,
            match,
            self._inventory.find_by_gtin_batch,
            unknown_name=self._config.intake.unknown_name,
            review_unknown=self._config.intake.review_unknown,
            now=now,
        )
        record = decision.record

        if decision.merged:
            self._inventory.update(record)
            logger.info(
                "Merged %s batch %s: +%d (total %d)",
                record.gtin14,
                record.batch,
                decision.added,
                record.quantity,
            )
            message = f"+{decision.added} qty (total: {record.quantity})"
        else:
            record.id = self._inventory.add(record)
            logger.info(
                "Created #%d %s %r [%s]",
                record.id,
                record.gtin14,
                record.name,
                record.match_kind,
            )
            if record.needs_review:
                message = "Product not found - please enter name"
            else:
                message = f"Added: {record.name}"

        return ScanResult(
            status=decision.action,
            code=code,
            decoded=decoded,
            match=match,
            record=record,
            message=message,
        )

    def process_batch(self, text: str, now: datetime | None = None) -> BatchSummary:
        """Process one code per line, strictly in order.

        A failing line is logged and counted; later lines still run.
        """
        summary = BatchSummary()
        lines = [ln.strip() for ln in _LINE_BREAKS.split(text or "") if ln.strip()]

        for line in lines:
            try:
                result = self.process_scan(line, now=now)
            except Exception as e:
                logger.exception("Failed to process %r", line)
                result = ScanResult(status=ERROR, code=line, message=str(e))

            summary.results.append(result)
            if result.ok:
                summary.processed += 1
            else:
                summary.errors += 1

        logger.info(
            "Batch complete: %d processed, %d errors",
            summary.processed,
            summary.errors,
        )
        return summary

    # --- inventory edits ------------------------------------------------------

    def edit_item(
        self,
        item_id: int,
        name: str,
        quantity: object = None,
        source_code: str | None = None,
        now: datetime | None = None,
    ) -> InventoryRecord:
        """Apply an operator correction and teach the catalog the name.

        Raises:
            ValueError: If ``name`` is blank.
            KeyError: If the record does not exist.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Please enter product name")

        record = self._inventory.get(item_id)
        if record is None:
            raise KeyError(f"Inventory record not found: {item_id}")

        changes: dict = {
            "name": name,
            "match_kind": MatchKind.MANUAL.value,
            "needs_review": False,
            "last_modified": timestamp(now),
        }
        if quantity is not None:
            changes["quantity"] = parse_quantity(quantity)
        if source_code is not None:
            changes["source_code"] = source_code.strip()

        record = replace(record, **changes)
        self._inventory.update(record)

        if record.gtin14:
            self._catalog.put(CatalogEntry(barcode=record.gtin14, name=name))
            self.rebuild_index()
            logger.info("Saved to catalog: %s -> %r", record.gtin14, name)
        return record

    def delete_item(self, item_id: int) -> bool:
        return self._inventory.delete(item_id)

    def clear_inventory(self) -> int:
        count = self._inventory.clear()
        logger.info("Inventory cleared: %d records removed", count)
        return count

    def records(
        self,
        status: str | None = None,
        query: str = "",
        today: date | None = None,
    ) -> list[InventoryRecord]:
        return filter_records(
            self._inventory.list_all(),
            status=status,
            query=query,
            today=today,
            soon_days=self._config.expiry.soon_days,
        )

    def stats(self, today: date | None = None) -> dict[str, int]:
        return inventory_stats(
            self._inventory.list_all(),
            today=today,
            soon_days=self._config.expiry.soon_days,
        )

    # --- catalog --------------------------------------------------------------

    def load_catalog(self, text: str, append: bool = False) -> int:
        """Ingest catalog text, replacing (default) or appending.

        The text is parsed completely before the store is touched, so a
        format error leaves the existing catalog unchanged.

        Raises:
            CatalogFormatError: If the text is empty or has no barcode column.
        """
        entries = parse_catalog_text(text)
        if append:
            count = self._catalog.put_many(entries)
        else:
            count = self._catalog.replace_all(entries)
        self.rebuild_index()
        logger.info("%s %d catalog products", "Appended" if append else "Loaded", count)
        return count

    def clear_catalog(self) -> None:
        self._catalog.clear()
        self.rebuild_index()

    # --- backup ---------------------------------------------------------------

    def backup(self, now: datetime | None = None) -> Backup:
        return build_backup(
            self._inventory.list_all(), self._catalog.list_all(), now=now
        )

    def restore(self, backup: Backup) -> tuple[int, int]:
        """Replace both inventory and catalog with the backup contents.

        Both tables are rewritten in one transaction; on failure neither
        changes.

        Returns:
            (inventory records restored, catalog entries restored)
        """
        n_inventory = self._inventory.replace_all(
            backup.inventory, catalog=backup.catalog
        )
        n_catalog = len(backup.catalog)
        self.rebuild_index()
        logger.info(
            "Backup restored: %d inventory records, %d catalog products",
            n_inventory,
            n_catalog,
        )
        return n_inventory, n_catalog
