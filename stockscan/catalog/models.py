"""Data models for the reference catalog."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    """A barcode -> product name pair from the reference catalog."""

    barcode: str
    name: str

    def to_dict(self) -> dict:
        return {"barcode": self.barcode, "name": self.name}
