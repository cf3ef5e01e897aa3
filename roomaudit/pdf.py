"""PDF generation for inventory and audit reports using ReportLab."""

from __future__ import annotations

from pathlib import Path
from xml.sax.saxutils import escape

from .report import EMPTY_SCAN_NOTE, ReportDocument

_HEADER_COLOR = "#4A90D9"
_STRIPE_COLOR = "#F5F5F5"
_STATUS_COLORS = {
    "Match": "#E8F8EC",
    "Mismatch": "#FFF3E0",
    "Missing": "#FFE5E5",
}


def _col_widths(columns: list[str], mm: float) -> list[float]:
    if len(columns) == 4:
        return [70 * mm, 30 * mm, 30 * mm, 50 * mm]
    return [90 * mm, 30 * mm, 60 * mm]


def generate_pdf(document: ReportDocument, output_path: str | Path) -> Path:
    """Render an assembled report document to a PDF file.

    Args:
        document: The assembled report to render.
        output_path: Where to save the PDF file.

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
            "reportlab is required for PDF output: pip install reportlab"
        ) from None

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=document.title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Title"],
        fontName="Helvetica-Bold",
        fontSize=18,
        leading=24,
    )
    subtitle_style = ParagraphStyle(
        "ReportSubtitle",
        parent=styles["Normal"],
        fontName="Helvetica",
        fontSize=10,
        leading=14,
        alignment=1,
        textColor=colors.grey,
    )
    room_style = ParagraphStyle(
        "Room",
        parent=styles["Heading2"],
        fontName="Helvetica-Bold",
        fontSize=14,
        leading=20,
        spaceBefore=6 * mm,
        spaceAfter=2 * mm,
    )
    scan_style = ParagraphStyle(
        "Scan",
        parent=styles["Heading3"],
        fontName="Helvetica-Bold",
        fontSize=11,
        leading=15,
        textColor=colors.HexColor("#666666"),
        spaceBefore=3 * mm,
    )
    note_style = ParagraphStyle(
        "Note",
        parent=styles["Italic"],
        fontSize=9,
        leading=13,
    )

    elements: list = []

    elements.append(Paragraph(escape(document.title), title_style))
    if document.subtitle:
        elements.append(Paragraph(escape(document.subtitle), subtitle_style))
    elements.append(
        Paragraph(f"Generated on: {document.generated_at}", subtitle_style)
    )
    elements.append(Spacer(1, 4 * mm))

    base_style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(_HEADER_COLOR)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor(_STRIPE_COLOR)]),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ]
    col_widths = _col_widths(document.columns, mm)

    for room in document.rooms:
        elements.append(Paragraph(escape(room.title), room_style))

        for scan in room.scans:
            heading = escape(scan.heading)
            if scan.date:
                heading += f" <font size=8>({escape(scan.date)})</font>"
            elements.append(Paragraph(heading, scan_style))

            if not scan.rows:
                elements.append(Paragraph(EMPTY_SCAN_NOTE, note_style))
                continue

            table_data = [list(document.columns)]
            style = list(base_style)
            for i, row in enumerate(scan.rows, 1):
                table_data.append(row.cells())
                if row.status in _STATUS_COLORS:
                    style.append(
                        ("BACKGROUND", (-1, i), (-1, i), colors.HexColor(_STATUS_COLORS[row.status]))
                    )
            t = Table(table_data, colWidths=col_widths)
            t.setStyle(TableStyle(style))
            elements.append(Spacer(1, 2 * mm))
            elements.append(t)

    if not document.rooms:
        elements.append(Paragraph("No scans recorded.", note_style))

    doc.build(elements)
    return output_path
