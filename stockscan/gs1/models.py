"""Data models for decoded barcode payloads."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Expiry:
    """An expiry date in the three fixed-width forms used downstream."""

    iso: str       # YYYY-MM-DD
    ddmmyy: str    # DDMMYY (export format)
    display: str   # DD/MM/YYYY


@dataclass
class DecodedRecord:
    """Structured result of decoding one scanned string."""

    raw: str
    gtin14: str = ""
    gtin13: str = ""
    expiry: Expiry | None = None
    batch: str = ""
    serial: str = ""
    quantity: int = 1
    is_structured: bool = False

    @property
    def has_gtin(self) -> bool:
        return bool(self.gtin14)
