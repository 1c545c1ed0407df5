"""CLI entry point for stockscan."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from .backup import BackupFormatError, dump_backup, load_backup
from .catalog.ingest import CatalogFormatError
from .config import StockScanConfig, load_config
from .export import default_export_name, write_export
from .gs1.expiry import EXPIRED, EXPIRING, OK, UNKNOWN
from .intake import StockIntake

_STATUS_MARKS = {EXPIRED: "✗", EXPIRING: "!", OK: "✓", UNKNOWN: "?"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stockscan",
        description="Stock intake tracker: scan GS1 / EAN barcodes, match them "
        "against a product catalog and track batches and expiry dates",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a TOML config file",
    )

    sub = parser.add_subparsers(dest="command")

    # scan
    scan_parser = sub.add_parser("scan", help="Record one or more scanned codes")
    scan_parser.add_argument("codes", nargs="+", help="Scanned barcode text")

    # paste
    paste_parser = sub.add_parser("paste", help="Record one code per line")
    paste_parser.add_argument(
        "file", nargs="?", default=None, help="Text file (default: stdin)"
    )

    # match
    match_parser = sub.add_parser("match", help="Decode and match without saving")
    match_parser.add_argument("code", help="Scanned barcode text")
    match_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # list
    list_parser = sub.add_parser("list", help="List inventory")
    list_parser.add_argument(
        "--status",
        choices=["all", EXPIRED, EXPIRING, OK, UNKNOWN],
        default="all",
    )
    list_parser.add_argument("--search", default="", help="Filter by name, GTIN or batch")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # stats
    sub.add_parser("stats", help="Show inventory totals")

    # edit
    edit_parser = sub.add_parser("edit", help="Correct an inventory record")
    edit_parser.add_argument("id", type=int)
    edit_parser.add_argument("--name", required=True)
    edit_parser.add_argument("--qty", default=None)
    edit_parser.add_argument("--source-code", default=None)

    # delete
    delete_parser = sub.add_parser("delete", help="Delete an inventory record")
    delete_parser.add_argument("id", type=int)

    # clear
    clear_parser = sub.add_parser("clear", help="Delete ALL inventory records")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm")

    # catalog
    cat_parser = sub.add_parser("catalog", help="Manage the product catalog")
    cat_sub = cat_parser.add_subparsers(dest="catalog_command")
    load_parser = cat_sub.add_parser("load", help="Load a CSV/TSV catalog file")
    load_parser.add_argument("file")
    load_parser.add_argument(
        "--append", action="store_true", help="Add to the catalog instead of replacing it"
    )
    cat_clear = cat_sub.add_parser("clear", help="Delete the whole catalog")
    cat_clear.add_argument("--yes", action="store_true", help="Confirm")
    cat_sub.add_parser("count", help="Show the number of catalog products")

    # export
    export_parser = sub.add_parser("export", help="Export inventory as CSV")
    export_parser.add_argument("--output", "-o", default=None, metavar="FILE")

    # backup / restore
    backup_parser = sub.add_parser("backup", help="Write a JSON backup")
    backup_parser.add_argument("--output", "-o", default=None, metavar="FILE")
    restore_parser = sub.add_parser("restore", help="Replace all data from a backup")
    restore_parser.add_argument("file")

    # report
    report_parser = sub.add_parser("report", help="Generate a PDF expiry report")
    report_parser.add_argument("--pdf", required=True, metavar="FILE")

    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(levelname)s [%(name)s] %(message)s",
    )

    intake = StockIntake.from_config(config)
    try:
        _dispatch(intake, config, args)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)
    except (CatalogFormatError, BackupFormatError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except sqlite3.Error as e:
        print(f"Storage error: {e}", file=sys.stderr)
        sys.exit(2)
    finally:
        intake.close()


def _dispatch(intake: StockIntake, config: StockScanConfig, args) -> None:
    match args.command:
        case "scan":
            for code in args.codes:
                _print_scan(intake.process_scan(code))
        case "paste":
            _cmd_paste(intake, args)
        case "match":
            _cmd_match(intake, args)
        case "list":
            _cmd_list(intake, config, args)
        case "stats":
            stats = intake.stats()
            print(f"Total: {stats['total']}")
            print(f"Expiring (≤{config.expiry.soon_days} days): {stats['expiring']}")
            print(f"Expired: {stats['expired']}")
        case "edit":
            record = intake.edit_item(
                args.id, args.name, quantity=args.qty, source_code=args.source_code
            )
            print(f"Saved #{record.id}: {record.name} ×{record.quantity}")
        case "delete":
            if not intake.delete_item(args.id):
                raise KeyError(f"Inventory record not found: {args.id}")
            print(f"Deleted #{args.id}")
        case "clear":
            if not args.yes:
                print("Refusing to clear inventory without --yes", file=sys.stderr)
                sys.exit(1)
            count = intake.clear_inventory()
            print(f"History cleared ({count} records)")
        case "catalog":
            _cmd_catalog(intake, args)
        case "export":
            _cmd_export(intake, config, args)
        case "backup":
            output = Path(args.output or f"stock-backup-{_today_stamp()}.json")
            output.write_text(dump_backup(intake.backup()), encoding="utf-8")
            print(f"Backup written: {output}")
        case "restore":
            backup = load_backup(Path(args.file).read_text(encoding="utf-8"))
            n_inv, n_cat = intake.restore(backup)
            print(f"Backup restored: {n_inv} inventory records, {n_cat} catalog products")
        case "report":
            _cmd_report(intake, config, args)


def _today_stamp() -> str:
    return f"{date.today():%Y%m%d}"


def _print_scan(result) -> None:
    if not result.ok:
        print(f"✗ {result.code}: {result.message}", file=sys.stderr)
        return
    rec = result.record
    mark = "?" if result.needs_review else "✓"
    print(f"{mark} #{rec.id} {rec.name} [{rec.match_kind}] {result.message}")
    print(
        f"    GTIN {rec.gtin14}  batch {rec.batch or '-'}  "
        f"expiry {rec.expiry_display or 'N/A'}  qty {rec.quantity}"
    )


def _cmd_paste(intake: StockIntake, args) -> None:
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    summary = intake.process_batch(text)
    for result in summary.results:
        _print_scan(result)
    if summary.errors:
        print(f"Processed {summary.processed}, {summary.errors} errors")
    else:
        print(f"Processed {summary.processed} items")


def _cmd_match(intake: StockIntake, args) -> None:
    decoded, match = intake.lookup(args.code)
    if args.json:
        data = {
            "gtin14": decoded.gtin14,
            "gtin13": decoded.gtin13,
            "expiry": decoded.expiry.iso if decoded.expiry else "",
            "batch": decoded.batch,
            "serial": decoded.serial,
            "quantity": decoded.quantity,
            "structured": decoded.is_structured,
            "name": match.name,
            "match": match.kind.value,
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not decoded.has_gtin:
        print("Invalid barcode format", file=sys.stderr)
        sys.exit(1)
    print(f"GTIN-14: {decoded.gtin14}  GTIN-13: {decoded.gtin13}")
    print(f"Expiry:  {decoded.expiry.display if decoded.expiry else 'N/A'}")
    print(f"Batch:   {decoded.batch or '-'}  Serial: {decoded.serial or '-'}")
    print(f"Qty:     {decoded.quantity}")
    print(f"Match:   {match.kind.value} {match.name}")


def _cmd_list(intake: StockIntake, config: StockScanConfig, args) -> None:
    records = intake.records(status=args.status, query=args.search)
    soon = config.expiry.soon_days

    if args.json:
        data = [dict(r.to_dict(), status=r.status(soon_days=soon)) for r in records]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not records:
        print("No items found")
        return
    for rec in records:
        mark = _STATUS_MARKS[rec.status(soon_days=soon)]
        review = "  (needs name)" if rec.needs_review else ""
        print(
            f"{mark} #{rec.id:<5} {rec.name:<40} ×{rec.quantity:<4} "
            f"{rec.gtin14}  {rec.batch or '-':<12} {rec.expiry_display or 'N/A'}"
            f"  [{rec.match_kind}]{review}"
        )


def _cmd_catalog(intake: StockIntake, args) -> None:
    match args.catalog_command:
        case "load":
            text = Path(args.file).read_text(encoding="utf-8-sig")
            count = intake.load_catalog(text, append=args.append)
            print(f"{'Appended' if args.append else 'Uploaded'} {count} products")
        case "clear":
            if not args.yes:
                print("Refusing to clear catalog without --yes", file=sys.stderr)
                sys.exit(1)
            intake.clear_catalog()
            print("Catalog cleared")
        case "count":
            print(intake.catalog.count())
        case _:
            print("catalog: choose load, clear or count", file=sys.stderr)
            sys.exit(1)


def _cmd_export(intake: StockIntake, config: StockScanConfig, args) -> None:
    records = intake.records()
    if not records:
        print("No data to export", file=sys.stderr)
        return
    output = Path(args.output) if args.output else Path(
        config.export.directory
    ).expanduser() / default_export_name()
    write_export(records, output)
    print(f"Export written: {output} ({len(records)} rows)")


def _cmd_report(intake: StockIntake, config: StockScanConfig, args) -> None:
    from .report import generate_report

    try:
        path = generate_report(
            intake.records(), args.pdf, soon_days=config.expiry.soon_days
        )
    except ImportError as e:
        print(f"PDF error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Report written: {path}")
