"""Tests for the merge decision and inventory queries."""

from datetime import date, datetime

import pytest

from stockscan.catalog.matcher import NO_MATCH, MatchKind, MatchResult
from stockscan.gs1.decoder import decode
from stockscan.inventory import (
    CREATED,
    MERGED,
    UNKNOWN_PRODUCT_NAME,
    InventoryRecord,
    filter_records,
    inventory_stats,
    resolve_merge,
)

NOW = datetime(2025, 3, 1, 9, 30, 0)
ASPIRIN = MatchResult("Aspirin", MatchKind.EXACT)


def _no_lookup(gtin14, batch):
    raise AssertionError("lookup must not be called")


def test_resolve_merge_increments_same_batch():
    existing = InventoryRecord(
        id=7, gtin14="05012345678900", name="Aspirin", batch="L1", quantity=1,
        last_modified="2025-01-01T00:00:00",
    )
    calls = []

    def lookup(gtin14, batch):
        calls.append((gtin14, batch))
        return existing

    decoded = decode("(01)05012345678900(10)L1(30)3")
    decision = resolve_merge(decoded, ASPIRIN, lookup, now=NOW)

    assert calls == [("05012345678900", "L1")]
    assert decision.action == MERGED
    assert decision.merged
    assert decision.added == 3
    assert decision.total == 4
    assert decision.record.id == 7
    assert decision.record.last_modified == "2025-03-01T09:30:00"
    # the looked-up record is not mutated
    assert existing.quantity == 1


def test_resolve_merge_new_batch_creates():
    decoded = decode("(01)05012345678900(17)251231(10)L2")
    decision = resolve_merge(decoded, ASPIRIN, lambda g, b: None, now=NOW)

    assert decision.action == CREATED
    rec = decision.record
    assert rec.id is None
    assert rec.name == "Aspirin"
    assert rec.match_kind == "EXACT"
    assert rec.batch == "L2"
    assert rec.expiry_iso == "2025-12-31"
    assert rec.expiry_ddmmyy == "311225"
    assert rec.expiry_display == "31/12/2025"
    assert rec.raw == "(01)05012345678900(17)251231(10)L2"
    assert rec.needs_review is False


def test_resolve_merge_empty_batch_never_merges():
    decoded = decode("5012345678900")
    decision = resolve_merge(decoded, ASPIRIN, _no_lookup, now=NOW)
    assert decision.action == CREATED
    assert decision.record.quantity == 1


def test_resolve_merge_unknown_product_flagged():
    decision = resolve_merge(decode("4006381333931"), NO_MATCH, _no_lookup, now=NOW)
    rec = decision.record
    assert rec.name == UNKNOWN_PRODUCT_NAME
    assert rec.match_kind == "NONE"
    assert rec.needs_review is True


def test_resolve_merge_unknown_name_options():
    decision = resolve_merge(
        decode("4006381333931"),
        NO_MATCH,
        _no_lookup,
        unknown_name="???",
        review_unknown=False,
        now=NOW,
    )
    assert decision.record.name == "???"
    assert decision.record.needs_review is False


def test_record_from_dict_ignores_unknown_keys():
    rec = InventoryRecord.from_dict(
        {"gtin14": "05012345678900", "name": "Tea", "colour": "green"}
    )
    assert rec.name == "Tea"
    assert rec.quantity == 1
    assert rec.to_dict()["gtin14"] == "05012345678900"


@pytest.fixture
def records():
    return [
        InventoryRecord(gtin14="05012345678900", name="Aspirin", batch="L1",
                        expiry_iso="2025-01-10"),
        InventoryRecord(gtin14="04006381333931", name="Pen", batch="B7",
                        expiry_iso="2025-02-15"),
        InventoryRecord(gtin14="00000096385074", name="Gum", expiry_iso="2026-01-01"),
        InventoryRecord(gtin14="00000000012345", name="Loose"),
    ]


def test_filter_records_by_status(records):
    today = date(2025, 2, 1)
    assert [r.name for r in filter_records(records, "expired", today=today)] == ["Aspirin"]
    assert [r.name for r in filter_records(records, "expiring", today=today)] == ["Pen"]
    assert [r.name for r in filter_records(records, "ok", today=today)] == ["Gum"]
    assert [r.name for r in filter_records(records, "unknown", today=today)] == ["Loose"]
    assert len(filter_records(records, "all", today=today)) == 4
    assert len(filter_records(records, None, today=today)) == 4


def test_filter_records_search(records):
    assert [r.name for r in filter_records(records, query="asp")] == ["Aspirin"]
    assert [r.name for r in filter_records(records, query="4006381")] == ["Pen"]
    assert [r.name for r in filter_records(records, query="b7")] == ["Pen"]
    assert filter_records(records, query="nothing") == []


def test_inventory_stats(records):
    stats = inventory_stats(records, today=date(2025, 2, 1))
    assert stats == {"total": 4, "expiring": 1, "expired": 1}
