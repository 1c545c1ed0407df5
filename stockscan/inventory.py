"""Inventory records, the create-vs-increment merge decision, and queries."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, fields, replace
from datetime import date, datetime

from .catalog.matcher import MatchKind, MatchResult
from .gs1.expiry import DEFAULT_SOON_DAYS, EXPIRED, EXPIRING, expiry_status
from .gs1.models import DecodedRecord

UNKNOWN_PRODUCT_NAME = "Product Name Unknown"

CREATED = "created"
MERGED = "merged"


@dataclass
class InventoryRecord:
    """One stock line: a product/batch pair with a running quantity."""

    gtin14: str
    name: str
    match_kind: str = MatchKind.NONE.value
    gtin13: str = ""
    batch: str = ""
    serial: str = ""
    quantity: int = 1
    expiry_iso: str = ""
    expiry_ddmmyy: str = ""
    expiry_display: str = ""
    raw: str = ""
    source_code: str = ""
    needs_review: bool = False
    last_modified: str = ""
    id: int | None = None

    def status(self, today: date | None = None, soon_days: int = DEFAULT_SOON_DAYS) -> str:
        return expiry_status(self.expiry_iso, today, soon_days)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> InventoryRecord:
        """Build a record from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class MergeDecision:
    """Outcome of resolving one scan against existing inventory."""

    action: str  # "created" or "merged"
    record: InventoryRecord
    added: int

    @property
    def merged(self) -> bool:
        return self.action == MERGED

    @property
    def total(self) -> int:
        return self.record.quantity


InventoryLookup = Callable[[str, str], InventoryRecord | None]


def timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).isoformat(timespec="seconds")


def resolve_merge(
    decoded: DecodedRecord,
    match: MatchResult,
    lookup: InventoryLookup,
    *,
    unknown_name: str = UNKNOWN_PRODUCT_NAME,
    review_unknown: bool = True,
    now: datetime | None = None,
) -> MergeDecision:
    """Decide whether a scan increments an existing record or creates one.

    Only scans carrying a batch can merge, and only into a record with the
    same (gtin14, batch). ``lookup`` is not called for batchless scans.
    Nothing is persisted here.
    """
    stamp = timestamp(now)

    if decoded.batch:
        existing = lookup(decoded.gtin14, decoded.batch)
        if existing is not None:
            merged = replace(
                existing,
                quantity=(existing.quantity or 1) + decoded.quantity,
                last_modified=stamp,
            )
            return MergeDecision(action=MERGED, record=merged, added=decoded.quantity)

    if match.kind is MatchKind.NONE or not match.name:
        name, kind, review = unknown_name, MatchKind.NONE, review_unknown
    else:
        name, kind, review = match.name, match.kind, False

    expiry = decoded.expiry
    record = InventoryRecord(
        gtin14=decoded.gtin14,
        gtin13=decoded.gtin13,
        name=name,
        match_kind=kind.value,
        batch=decoded.batch,
        serial=decoded.serial,
        quantity=decoded.quantity,
        expiry_iso=expiry.iso if expiry else "",
        expiry_ddmmyy=expiry.ddmmyy if expiry else "",
        expiry_display=expiry.display if expiry else "",
        raw=decoded.raw,
        needs_review=review,
        last_modified=stamp,
    )
    return MergeDecision(action=CREATED, record=record, added=decoded.quantity)


def filter_records(
    records: Iterable[InventoryRecord],
    status: str | None = None,
    query: str = "",
    today: date | None = None,
    soon_days: int = DEFAULT_SOON_DAYS,
) -> list[InventoryRecord]:
    """Filter by expiry status and a case-insensitive name/GTIN/batch search."""
    q = (query or "").strip().lower()
    result = []
    for rec in records:
        if status and status != "all" and rec.status(today, soon_days) != status:
            continue
        if q and not (
            q in (rec.name or "").lower()
            or q in (rec.gtin14 or "")
            or q in (rec.batch or "").lower()
        ):
            continue
        result.append(rec)
    return result


def inventory_stats(
    records: Iterable[InventoryRecord],
    today: date | None = None,
    soon_days: int = DEFAULT_SOON_DAYS,
) -> dict[str, int]:
    """Count all, expiring and expired records."""
    stats = {"total": 0, "expiring": 0, "expired": 0}
    for rec in records:
        stats["total"] += 1
        status = rec.status(today, soon_days)
        if status == EXPIRED:
            stats["expired"] += 1
        elif status == EXPIRING:
            stats["expiring"] += 1
    return stats
