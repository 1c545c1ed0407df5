"""Parse delimited catalog files (CSV / TSV) into catalog entries."""

from __future__ import annotations

import csv
import io
import re

from .models import CatalogEntry

BARCODE_COLUMNS = ("barcode", "gtin", "ean", "upc", "code", "sku", "productcode")
NAME_COLUMNS = ("name", "productname", "product_name", "description", "product", "item")

_LINE_BREAKS = re.compile(r"[\r\n]+")


class CatalogFormatError(ValueError):
    """The catalog file cannot be ingested (empty, or no barcode column)."""


def _unquote(cell: str) -> str:
    return cell.strip().strip("\"'").strip()


def _find_column(headers: list[str], aliases: tuple[str, ...]) -> int:
    for i, header in enumerate(headers):
        if header in aliases:
            return i
    return -1


def parse_catalog_text(text: str) -> list[CatalogEntry]:
    """Parse catalog text with a mandatory header row.

    The delimiter is a tab if the header contains one, otherwise a comma.
    Header names are matched case-insensitively against known aliases.
    Rows with an empty barcode are dropped; the name may be empty.

    Raises:
        CatalogFormatError: If there is no data row or no barcode column.
    """
    lines = [line for line in _LINE_BREAKS.split((text or "").strip()) if line.strip()]
    if len(lines) < 2:
        raise CatalogFormatError("Catalog file is empty or has no data rows")

    delimiter = "\t" if "\t" in lines[0] else ","
    rows = csv.reader(io.StringIO("\n".join(lines)), delimiter=delimiter)

    headers = [_unquote(h).lower() for h in next(rows)]
    barcode_idx = _find_column(headers, BARCODE_COLUMNS)
    name_idx = _find_column(headers, NAME_COLUMNS)
    if barcode_idx == -1:
        raise CatalogFormatError(
            f"No barcode column found (expected one of: {', '.join(BARCODE_COLUMNS)})"
        )

    entries: list[CatalogEntry] = []
    for cols in rows:
        cells = [_unquote(c) for c in cols]
        barcode = cells[barcode_idx] if barcode_idx < len(cells) else ""
        name = cells[name_idx] if 0 <= name_idx < len(cells) else ""
        if barcode:
            entries.append(CatalogEntry(barcode=barcode, name=name))
    return entries
