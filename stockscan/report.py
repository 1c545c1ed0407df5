"""PDF expiry report for inventory records using ReportLab."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from pathlib import Path

from .gs1.expiry import DEFAULT_SOON_DAYS, EXPIRED, EXPIRING, OK, UNKNOWN
from .inventory import InventoryRecord

# Most urgent first
STATUS_ORDER = (EXPIRED, EXPIRING, UNKNOWN, OK)

STATUS_TITLES = {
    EXPIRED: "Expired",
    EXPIRING: "Expiring soon",
    UNKNOWN: "No expiry recorded",
    OK: "In date",
}

_STATUS_COLOURS = {
    EXPIRED: "#C0392B",
    EXPIRING: "#E67E22",
    UNKNOWN: "#7F8C8D",
    OK: "#27AE60",
}


def group_by_status(
    records: Iterable[InventoryRecord],
    today: date | None = None,
    soon_days: int = DEFAULT_SOON_DAYS,
) -> dict[str, list[InventoryRecord]]:
    """Bucket records by expiry status, each bucket sorted by expiry date."""
    groups: dict[str, list[InventoryRecord]] = {s: [] for s in STATUS_ORDER}
    for rec in records:
        groups[rec.status(today, soon_days)].append(rec)
    for recs in groups.values():
        recs.sort(key=lambda r: (r.expiry_iso or "9999", r.name))
    return groups


def generate_report(
    records: Iterable[InventoryRecord],
    output_path: str | Path,
    today: date | None = None,
    soon_days: int = DEFAULT_SOON_DAYS,
) -> Path:
    """Generate an A4 PDF listing inventory grouped by expiry status.

    Returns:
        Path to the generated PDF file.

    Raises:
        ImportError: If reportlab is not installed.
    """
    try:
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.lib.units import mm
        from reportlab.platypus import (
            Paragraph,
            SimpleDocTemplate,
            Spacer,
            Table,
            TableStyle,
        )
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF reports: pip install 'stockscan[pdf]'"
        )

    today = today or date.today()
    groups = group_by_status(records, today, soon_days)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )

    styles = getSampleStyleSheet()
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Normal"],
        fontSize=10,
        leading=14,
        textColor=colors.grey,
    )
    heading_style = ParagraphStyle(
        "Section",
        parent=styles["Heading2"],
        fontSize=13,
        leading=18,
        spaceAfter=2 * mm,
    )

    elements: list = []
    total = sum(len(v) for v in groups.values())
    elements.append(Paragraph(f"Stock expiry report {today:%d/%m/%Y}", styles["Title"]))
    elements.append(
        Paragraph(
            f"{total} lines, {len(groups[EXPIRED])} expired, "
            f"{len(groups[EXPIRING])} expiring within {soon_days} days",
            subtitle_style,
        )
    )
    elements.append(Spacer(1, 6 * mm))

    col_widths = [70 * mm, 35 * mm, 28 * mm, 25 * mm, 15 * mm]

    for status in STATUS_ORDER:
        recs = groups[status]
        if not recs:
            continue

        elements.append(
            Paragraph(f"{STATUS_TITLES[status]} ({len(recs)})", heading_style)
        )
        table_data = [["Description", "GTIN", "Batch", "Expiry", "Qty"]]
        for rec in recs:
            table_data.append([
                rec.name,
                rec.gtin14,
                rec.batch or "-",
                rec.expiry_display or "N/A",
                str(rec.quantity),
            ])

        t = Table(table_data, colWidths=col_widths, repeatRows=1)
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(_STATUS_COLOURS[status])),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F5F5F5")]),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        elements.append(t)
        elements.append(Spacer(1, 6 * mm))

    if total == 0:
        elements.append(Paragraph("No inventory recorded.", styles["Normal"]))

    doc.build(elements)
    return output_path
