"""
PDF estimate reports.

Renders the priced shot list, totals and the tier legend used to
price them.
"""

import html
import logging
import random
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from framecount.core.pricing import PricingTier
from framecount.core.shots import Shot
from .formatting import format_currency, format_frame_range

logger = logging.getLogger(__name__)

SHOT_TABLE_HEADER = ["No", "Shot", "Frames", "Price (IDR)"]
LEGEND_HEADER = ["Tier", "Frame range", "Unit price"]
HEADER_BLUE = colors.HexColor("#2563eb")


def _new_report_id() -> str:
    return str(random.randint(0, 99999))


@dataclass
class ReportConfig:
    """Presentation details of an exported report."""
    title: str
    author: str = ""
    report_id: str = field(default_factory=_new_report_id)
    notes: str = ""


def shot_rows(shots: Sequence[Shot]) -> List[List[str]]:
    """Table rows for the shot list, numbered from 1."""
    return [
        [str(index), shot.name, str(shot.frames), format_currency(shot.price)]
        for index, shot in enumerate(shots, start=1)
    ]


def legend_rows(tiers: Sequence[PricingTier]) -> List[List[str]]:
    """Table rows describing each pricing tier."""
    return [
        [tier.label, format_frame_range(tier), format_currency(tier.price)]
        for tier in tiers
    ]


def build_report_pdf(
    shots: Sequence[Shot],
    tiers: Sequence[PricingTier],
    config: ReportConfig,
    path: Union[str, Path],
    report_date: Optional[date] = None,
) -> Path:
    """Write an estimate report as a PDF.

    The legend is built from ``tiers``, which must be the list the shots
    were priced with so the legend matches the prices shown.

    Args:
        shots: Priced shots in display order
        tiers: Tier list used to price the shots
        config: Title, author, report id and notes
        path: Output file path
        report_date: Date printed on the report (defaults to today)

    Returns:
        Path of the written file
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    report_date = report_date or date.today()

    styles = getSampleStyleSheet()
    small_italic = ParagraphStyle(
        "Notes",
        parent=styles["Normal"],
        fontName="Helvetica-Oblique",
        fontSize=8,
        textColor=colors.HexColor("#646464"),
    )

    story = [
        Paragraph(html.escape(config.title), styles["Title"]),
        Paragraph(f"Date: {report_date.strftime('%d/%m/%Y')}", styles["Normal"]),
        Paragraph(f"Artist: {html.escape(config.author) or '-'}", styles["Normal"]),
        Paragraph(f"Report ID: #{html.escape(config.report_id)}", styles["Normal"]),
        Spacer(1, 6 * mm),
    ]

    shot_table = Table([SHOT_TABLE_HEADER] + shot_rows(shots), repeatRows=1)
    shot_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
    ]))
    story.append(shot_table)
    story.append(Spacer(1, 6 * mm))

    total_frames = sum(shot.frames for shot in shots)
    total_price = sum((shot.price for shot in shots), Decimal("0"))
    story.append(Paragraph(f"<b>Total frames: {total_frames}</b>", styles["Normal"]))
    story.append(Paragraph(f"<b>Total estimate: {format_currency(total_price)}</b>", styles["Normal"]))
    story.append(Spacer(1, 8 * mm))

    story.append(Paragraph("<b>Pricing tiers:</b>", styles["Normal"]))
    legend = Table(
        [LEGEND_HEADER] + legend_rows(tiers),
        colWidths=[50 * mm, 40 * mm, 40 * mm],
        hAlign="LEFT",
    )
    legend.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f0f0f0")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
    ]))
    story.append(legend)

    if config.notes:
        story.append(Spacer(1, 6 * mm))
        story.append(Paragraph(f"Notes: {html.escape(config.notes)}", small_italic))

    doc = SimpleDocTemplate(str(output), pagesize=A4, title=config.title)
    doc.build(story)
    logger.info("Wrote report with %d shot(s) to %s", len(shots), output)
    return output
