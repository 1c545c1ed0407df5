"""Tests for the PDF expiry report."""

from datetime import date

import pytest

from stockscan.inventory import InventoryRecord
from stockscan.report import STATUS_ORDER, group_by_status


def _records():
    return [
        InventoryRecord(gtin14="05012345678900", name="Aspirin", batch="L1",
                        expiry_iso="2025-01-10", expiry_display="10/01/2025"),
        InventoryRecord(gtin14="04006381333931", name="Pen",
                        expiry_iso="2025-02-15", expiry_display="15/02/2025"),
        InventoryRecord(gtin14="04006381333931", name="Pen",
                        expiry_iso="2025-02-10", expiry_display="10/02/2025"),
        InventoryRecord(gtin14="00000096385074", name="Gum"),
    ]


def test_group_by_status():
    groups = group_by_status(_records(), today=date(2025, 2, 1))
    assert list(groups) == list(STATUS_ORDER)
    assert [r.name for r in groups["expired"]] == ["Aspirin"]
    assert [r.expiry_iso for r in groups["expiring"]] == ["2025-02-10", "2025-02-15"]
    assert [r.name for r in groups["unknown"]] == ["Gum"]
    assert groups["ok"] == []


def test_generate_report(tmp_path):
    pytest.importorskip("reportlab")
    from stockscan.report import generate_report

    output = generate_report(_records(), tmp_path / "reports" / "expiry.pdf",
                             today=date(2025, 2, 1))
    assert output.exists()
    assert output.read_bytes()[:4] == b"%PDF"


def test_generate_report_empty(tmp_path):
    pytest.importorskip("reportlab")
    from stockscan.report import generate_report

    output = generate_report([], tmp_path / "empty.pdf")
    assert output.stat().st_size > 0
