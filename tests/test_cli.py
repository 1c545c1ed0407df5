"""Tests for the stockscan CLI."""

import json

import pytest

from stockscan.cli import main

BRACKETED = "(01)05012345678900(17)251231(10)L1"


@pytest.fixture(autouse=True)
def db_env(tmp_path, monkeypatch):
    monkeypatch.setenv("STOCKSCAN_DB_PATH", str(tmp_path / "stock.db"))
    monkeypatch.setenv("STOCKSCAN_LOG_LEVEL", "WARNING")
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("barcode,name\n5012345678900,Aspirin\n", encoding="utf-8")
    return path


def _list_json(capsys):
    capsys.readouterr()
    main(["list", "--json"])
    return json.loads(capsys.readouterr().out)


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_scan_and_list(capsys, catalog_file):
    main(["catalog", "load", str(catalog_file)])
    main(["scan", BRACKETED, "(01)05012345678900(10)L1(30)2"])
    out = capsys.readouterr().out
    assert "Uploaded 1 products" in out
    assert "Aspirin" in out
    assert "+2 qty (total: 3)" in out

    items = _list_json(capsys)
    assert len(items) == 1
    assert items[0]["quantity"] == 3
    assert items[0]["match_kind"] == "EXACT"
    assert items[0]["expiry_iso"] == "2025-12-31"


def test_scan_rejected_goes_to_stderr(capsys):
    main(["scan", "hello"])
    captured = capsys.readouterr()
    assert "Invalid barcode format" in captured.err
    assert _list_json(capsys) == []


def test_match_json(capsys, catalog_file):
    main(["catalog", "load", str(catalog_file)])
    capsys.readouterr()
    main(["match", BRACKETED, "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["gtin14"] == "05012345678900"
    assert data["batch"] == "L1"
    assert data["expiry"] == "2025-12-31"
    assert data["name"] == "Aspirin"
    assert data["match"] == "EXACT"
    assert _list_json(capsys) == []


def test_match_invalid(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["match", "nope"])
    assert exc.value.code == 1


def test_paste_file(capsys, tmp_path):
    scans = tmp_path / "scans.txt"
    scans.write_text("5012345678900\nbad\n4006381333931\n", encoding="utf-8")
    main(["paste", str(scans)])
    assert "Processed 2, 1 errors" in capsys.readouterr().out
    assert len(_list_json(capsys)) == 2


def test_edit_teaches_catalog(capsys):
    main(["scan", "4006381333931"])
    item = _list_json(capsys)[0]
    assert item["needs_review"] is True

    main(["edit", str(item["id"]), "--name", "Pen", "--qty", "2"])
    main(["catalog", "count"])
    out = capsys.readouterr().out
    assert "Saved" in out
    assert out.strip().endswith("1")

    edited = _list_json(capsys)[0]
    assert edited["name"] == "Pen"
    assert edited["quantity"] == 2
    assert edited["match_kind"] == "MANUAL"


def test_edit_blank_name_fails(capsys):
    main(["scan", "4006381333931"])
    item = _list_json(capsys)[0]
    with pytest.raises(SystemExit) as exc:
        main(["edit", str(item["id"]), "--name", "  "])
    assert exc.value.code == 1


def test_delete_missing_fails(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["delete", "99"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Error: Inventory record not found: 99\n" in err
    assert "'" not in err


def test_clear_requires_confirmation(capsys):
    main(["scan", "5012345678900"])
    with pytest.raises(SystemExit):
        main(["clear"])
    assert len(_list_json(capsys)) == 1

    main(["clear", "--yes"])
    assert _list_json(capsys) == []


def test_catalog_load_bad_file_fails(capsys, tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_text("foo,bar\n1,2\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["catalog", "load", str(bad)])
    assert exc.value.code == 1
    assert "barcode column" in capsys.readouterr().err


def test_export(capsys, tmp_path):
    main(["scan", BRACKETED])
    out_file = tmp_path / "export.csv"
    main(["export", "--output", str(out_file)])
    lines = out_file.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("SOURCE CODE,")
    assert lines[1] == '"","05012345678900","Product Name Unknown","311225","L1","1"'


def test_stats(capsys):
    main(["scan", "5012345678900"])
    capsys.readouterr()
    main(["stats"])
    assert "Total: 1" in capsys.readouterr().out


def test_backup_and_restore(capsys, tmp_path, monkeypatch, catalog_file):
    main(["catalog", "load", str(catalog_file)])
    main(["scan", BRACKETED])
    backup_file = tmp_path / "backup.json"
    main(["backup", "--output", str(backup_file)])

    monkeypatch.setenv("STOCKSCAN_DB_PATH", str(tmp_path / "restored.db"))
    main(["restore", str(backup_file)])
    assert "1 inventory records, 1 catalog products" in capsys.readouterr().out

    items = _list_json(capsys)
    assert [i["name"] for i in items] == ["Aspirin"]


def test_restore_invalid_file_fails(capsys, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"inventory": []}', encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["restore", str(bad)])
    assert exc.value.code == 1
