"""Stock intake tracking from GS1 and EAN barcode scans."""

from .backup import Backup, BackupFormatError, dump_backup, load_backup
from .catalog import (
    CatalogEntry,
    CatalogFormatError,
    MatchKind,
    MatchResult,
    ProductMatcher,
    parse_catalog_text,
)
from .config import StockScanConfig, load_config
from .export import export_csv, write_export
from .gs1 import DecodedRecord, Expiry, decode, expiry_status, normalize_expiry
from .intake import BatchSummary, ScanResult, StockIntake
from .inventory import InventoryRecord, MergeDecision, resolve_merge

__all__ = [
    "StockIntake",
    "ScanResult",
    "BatchSummary",
    "StockScanConfig",
    "load_config",
    "DecodedRecord",
    "Expiry",
    "decode",
    "normalize_expiry",
    "expiry_status",
    "CatalogEntry",
    "CatalogFormatError",
    "parse_catalog_text",
    "MatchKind",
    "MatchResult",
    "ProductMatcher",
    "InventoryRecord",
    "MergeDecision",
    "resolve_merge",
    "export_csv",
    "write_export",
    "Backup",
    "BackupFormatError",
    "dump_backup",
    "load_backup",
]
