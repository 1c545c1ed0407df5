"""Tests for tiered product matching."""

import pytest

from stockscan.catalog.index import build_index
from stockscan.catalog.matcher import (
    FIRST,
    MatchKind,
    ProductMatcher,
    match_product,
)
from stockscan.catalog.models import CatalogEntry
from stockscan.gs1.decoder import decode

GTIN14 = "05012345678900"
GTIN13 = "5012345678900"


def _index(*pairs):
    return build_index([CatalogEntry(b, n) for b, n in pairs])


def test_match_exact_gtin14():
    index = _index(("05012345678900", "Aspirin"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.EXACT
    assert result.name == "Aspirin"
    assert result.matched


def test_match_exact_gtin13():
    index = _index(("5012345678900", "Aspirin"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.EXACT
    assert result.name == "Aspirin"


def test_match_last8_single_entry():
    index = _index(("7712345678900", "Cousin"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.LAST8
    assert result.name == "Cousin"


def test_match_last8_ambiguous_falls_through():
    """Several entries sharing the last 8 digits skip tier 3."""
    index = _index(("7712345678900", "A"), ("8812345678900", "B"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.SEQ6
    assert result.name == "A"


def test_match_last8_ambiguous_first_policy():
    index = _index(("7712345678900", "A"), ("8812345678900", "B"))
    result = match_product(index, GTIN14, GTIN13, ambiguous=FIRST)
    assert result.kind is MatchKind.LAST8_AMBIGUOUS
    assert result.name == "A"


def test_match_seq6():
    index = _index(("999567890111", "Widget"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.SEQ6
    assert result.name == "Widget"


def test_match_seq6_windows_outer_entries_inner():
    """The earliest window wins even if a later window hits an earlier entry."""
    index = _index(("111678900", "Late window"), ("222234567", "Early window"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.SEQ6
    assert result.name == "Early window"


def test_match_none():
    index = _index(("4006381333931", "Pen"))
    result = match_product(index, GTIN14, GTIN13)
    assert result.kind is MatchKind.NONE
    assert result.name == ""
    assert not result.matched


def test_match_empty_catalog_and_empty_gtin():
    index = build_index([])
    assert match_product(index, GTIN14, GTIN13).kind is MatchKind.NONE
    assert match_product(_index((GTIN14, "X")), "", "").kind is MatchKind.NONE


def test_matcher_rejects_unknown_policy():
    with pytest.raises(ValueError):
        ProductMatcher(ambiguous="random")


def test_matcher_rebuild_replaces_index():
    matcher = ProductMatcher()
    assert len(matcher) == 0
    assert matcher.match(GTIN14, GTIN13).kind is MatchKind.NONE

    matcher.rebuild([CatalogEntry(GTIN13, "Aspirin")])
    assert len(matcher) == 1
    assert matcher.match(GTIN14, GTIN13).name == "Aspirin"

    matcher.rebuild([])
    assert matcher.match(GTIN14, GTIN13).kind is MatchKind.NONE


def test_matcher_match_decoded():
    matcher = ProductMatcher()
    matcher.rebuild([CatalogEntry(GTIN13, "Aspirin")])
    result = matcher.match_decoded(decode("(01)05012345678900(10)L1"))
    assert result.kind is MatchKind.EXACT
    assert result.name == "Aspirin"
