"""Tests for catalog storage."""

import pytest

from stockscan.catalog.models import CatalogEntry
from stockscan.db.catalog import CatalogDB


@pytest.fixture
def db(tmp_path):
    d = CatalogDB(tmp_path / "test.db")
    yield d
    d.close()


def test_put_and_get(db):
    db.put(CatalogEntry("5012345678900", "Aspirin"))
    assert db.get("5012345678900") == CatalogEntry("5012345678900", "Aspirin")
    assert db.get("0000") is None


def test_put_overwrites_same_barcode(db):
    db.put(CatalogEntry("5012345678900", "Aspirin"))
    db.put(CatalogEntry("5012345678900", "Aspirin 500mg"))
    assert db.count() == 1
    assert db.get("5012345678900").name == "Aspirin 500mg"


def test_put_many_appends(db):
    db.put(CatalogEntry("111", "One"))
    written = db.put_many([CatalogEntry("222", "Two"), CatalogEntry("111", "Uno")])
    assert written == 2
    assert db.list_all() == [CatalogEntry("111", "Uno"), CatalogEntry("222", "Two")]


def test_replace_all(db):
    db.put_many([CatalogEntry("111", "One"), CatalogEntry("222", "Two")])
    assert db.replace_all([CatalogEntry("333", "Three")]) == 1
    assert db.list_all() == [CatalogEntry("333", "Three")]


def test_list_all_ordered_by_barcode(db):
    db.put_many([CatalogEntry("9", "Z"), CatalogEntry("1", "A"), CatalogEntry("5", "M")])
    assert [e.barcode for e in db.list_all()] == ["1", "5", "9"]


def test_clear(db):
    db.put(CatalogEntry("111", "One"))
    db.clear()
    assert db.count() == 0
    assert db.list_all() == []
