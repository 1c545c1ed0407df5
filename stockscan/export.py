"""CSV export of inventory records."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from .inventory import InventoryRecord

EXPORT_HEADERS = [
    "SOURCE CODE",
    "BARCODE (GTIN)",
    "DESCRIPTION",
    "EXPIRY (DDMMYY)",
    "BATCH",
    "QUANTITY",
]


def export_row(record: InventoryRecord) -> list[str]:
    return [
        record.source_code or "",
        record.gtin14 or record.gtin13 or "",
        record.name or "",
        record.expiry_ddmmyy or "",
        record.batch or "",
        str(record.quantity or 1),
    ]


def export_csv(records: Iterable[InventoryRecord]) -> str:
    """Render records as CSV: plain header, every data cell quoted."""
    buf = io.StringIO()
    buf.write(",".join(EXPORT_HEADERS) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow(export_row(record))
    return buf.getvalue()


def default_export_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"stock-export-{today:%Y%m%d}.csv"


def write_export(
    records: Iterable[InventoryRecord],
    output_path: str | Path,
) -> Path:
    """Write the CSV export to ``output_path`` and return the path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(export_csv(records), encoding="utf-8")
    return output_path
