"""Reference catalog: ingestion, index building and product matching."""

from .index import CatalogIndex, build_index
from .ingest import CatalogFormatError, parse_catalog_text
from .matcher import (
    AMBIGUOUS_POLICIES,
    MatchKind,
    MatchResult,
    ProductMatcher,
    match_product,
)
from .models import CatalogEntry

__all__ = [
    "CatalogEntry",
    "CatalogIndex",
    "build_index",
    "CatalogFormatError",
    "parse_catalog_text",
    "MatchKind",
    "MatchResult",
    "ProductMatcher",
    "match_product",
    "AMBIGUOUS_POLICIES",
]
