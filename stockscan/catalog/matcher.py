"""Tiered product matching against a catalog index."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .index import LAST8, CatalogIndex, build_index
from .models import CatalogEntry

if TYPE_CHECKING:
    from ..gs1.models import DecodedRecord

logger = logging.getLogger(__name__)

SEQ_WINDOW = 6
SEQ_SPAN = 10

FALLTHROUGH = "fallthrough"
FIRST = "first"
AMBIGUOUS_POLICIES = (FALLTHROUGH, FIRST)


class MatchKind(str, Enum):
    EXACT = "EXACT"
    LAST8 = "LAST8"
    LAST8_AMBIGUOUS = "LAST8_AMBIGUOUS"
    SEQ6 = "SEQ6"
    NONE = "NONE"
    MANUAL = "MANUAL"  # set by an operator edit, never by the matcher


@dataclass(frozen=True)
class MatchResult:
    name: str
    kind: MatchKind

    @property
    def matched(self) -> bool:
        return self.kind is not MatchKind.NONE


NO_MATCH = MatchResult(name="", kind=MatchKind.NONE)


def _seq6_windows(gtin14: str) -> list[str]:
    span = gtin14[-SEQ_SPAN:]
    return [span[i:i + SEQ_WINDOW] for i in range(len(span) - SEQ_WINDOW + 1)]


def match_product(
    index: CatalogIndex,
    gtin14: str,
    gtin13: str,
    ambiguous: str = FALLTHROUGH,
) -> MatchResult:
    """Resolve a GTIN to a product name, first hit wins.

    Tiers:
        1. exact GTIN-14
        2. exact GTIN-13
        3. trailing-8 bucket holding a single entry
           (several entries: skipped, or the first one flagged
           LAST8_AMBIGUOUS when ``ambiguous="first"``)
        4. any catalog barcode containing one of the five 6-digit windows
           of the last 10 GTIN digits; windows outer, entries inner
        5. no match

    Tier 4 scans the whole catalog per window and is only suitable for
    catalogs in the low thousands.
    """
    if not gtin14:
        return NO_MATCH

    if gtin14 in index.exact:
        return MatchResult(index.exact[gtin14], MatchKind.EXACT)
    if gtin13 and gtin13 in index.exact:
        return MatchResult(index.exact[gtin13], MatchKind.EXACT)

    bucket = index.last8.get(gtin14[-LAST8:]) if len(gtin14) >= LAST8 else None
    if bucket:
        if len(bucket) == 1:
            return MatchResult(bucket[0].name, MatchKind.LAST8)
        if ambiguous == FIRST:
            return MatchResult(bucket[0].name, MatchKind.LAST8_AMBIGUOUS)
        logger.debug(
            "Last-8 bucket %s holds %d entries, falling through",
            gtin14[-LAST8:],
            len(bucket),
        )

    for window in _seq6_windows(gtin14):
        for entry in index.entries:
            if window in entry.barcode:
                return MatchResult(entry.name, MatchKind.SEQ6)

    return NO_MATCH


class ProductMatcher:
    """Owns the current catalog index and answers match queries against it."""

    def __init__(
        self,
        index: CatalogIndex | None = None,
        ambiguous: str = FALLTHROUGH,
    ) -> None:
        if ambiguous not in AMBIGUOUS_POLICIES:
            raise ValueError(
                f"Unknown ambiguous_last8 policy: {ambiguous!r} "
                f"(choose from {', '.join(AMBIGUOUS_POLICIES)})"
            )
        self._index = index if index is not None else CatalogIndex()
        self._ambiguous = ambiguous

    @property
    def index(self) -> CatalogIndex:
        return self._index

    @property
    def ambiguous(self) -> str:
        return self._ambiguous

    def __len__(self) -> int:
        return len(self._index)

    def rebuild(self, items: Iterable[CatalogEntry | Mapping]) -> CatalogIndex:
        """Discard the current index and build a new one from ``items``."""
        self._index = build_index(items)
        logger.info("Catalog index rebuilt: %d products", len(self._index))
        return self._index

    def match(self, gtin14: str, gtin13: str) -> MatchResult:
        return match_product(self._index, gtin14, gtin13, self._ambiguous)

    def match_decoded(self, decoded: DecodedRecord) -> MatchResult:
        return self.match(decoded.gtin14, decoded.gtin13)
