"""PDF rendering of invoices with reportlab."""

import html
import logging
from io import BytesIO
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from backend.app.core.settings import get_settings
from backend.app.core.time import format_display_date, utc_now
from backend.app.services.calculations import format_currency, to_decimal

logger = logging.getLogger(__name__)


def _lines(*values: Any) -> List[str]:
    return [html.escape(str(value)) for value in values if value]


def _format_quantity(quantity: Any) -> str:
    value = to_decimal(quantity).normalize()
    return f"{value:f}"


def render_invoice_pdf(invoice: Any) -> bytes:
    """Render an invoice (with ``items``, ``client`` and ``freelancer``) to PDF bytes."""
    app_name = get_settings().app_name
    freelancer = invoice.freelancer
    client = invoice.client

    styles = getSampleStyleSheet()
    normal = styles["Normal"]
    heading = styles["Heading4"]
    title = styles["Title"]
    right = ParagraphStyle("right", parent=normal, alignment=TA_RIGHT)
    footer = ParagraphStyle("footer", parent=normal, fontSize=8, textColor=colors.grey, alignment=1)

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=16 * mm,
        bottomMargin=16 * mm,
        title=f"Invoice {invoice.invoice_number}",
        author=freelancer.name,
        subject=f"Invoice for {client.company_name}",
        creator=app_name,
    )
    story = []

    header = Table(
        [
            [
                Paragraph("INVOICE", title),
                Paragraph(
                    f"<b>Invoice #:</b> {html.escape(invoice.invoice_number)}<br/>"
                    f"<b>Status:</b> {html.escape(invoice.status.upper())}",
                    right,
                ),
            ]
        ],
        colWidths=[100 * mm, 74 * mm],
    )
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(header)
    story.append(Spacer(1, 6 * mm))

    story.append(
        Paragraph(
            f"<b>Date Issued:</b> {format_display_date(invoice.date_issued)}<br/>"
            f"<b>Due Date:</b> {format_display_date(invoice.due_date)}",
            normal,
        )
    )
    story.append(Spacer(1, 6 * mm))

    from_lines = _lines(freelancer.email, freelancer.address, freelancer.phone, freelancer.website)
    to_lines = _lines(client.contact_name, client.email, client.address, client.phone)
    parties = Table(
        [
            [Paragraph("From:", heading), Paragraph("To:", heading)],
            [
                Paragraph("<br/>".join([f"<b>{html.escape(freelancer.name)}</b>", *from_lines]), normal),
                Paragraph("<br/>".join([f"<b>{html.escape(client.company_name)}</b>", *to_lines]), normal),
            ],
        ],
        colWidths=[87 * mm, 87 * mm],
    )
    parties.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(parties)
    story.append(Spacer(1, 8 * mm))

    rows = [["Description", "Qty", "Rate", "Amount"]]
    for item in invoice.items:
        rows.append(
            [
                Paragraph(html.escape(item.description), normal),
                _format_quantity(item.quantity),
                format_currency(item.rate),
                format_currency(item.amount),
            ]
        )
    items_table = Table(rows, repeatRows=1, colWidths=[100 * mm, 20 * mm, 27 * mm, 27 * mm])
    items_table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (1, -1), "CENTER"),
                ("ALIGN", (2, 0), (3, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    story.append(items_table)
    story.append(Spacer(1, 6 * mm))

    tax_rate = to_decimal(invoice.tax_rate).normalize()
    totals = Table(
        [
            ["Subtotal:", format_currency(invoice.subtotal)],
            [f"Tax ({tax_rate:f}%):", format_currency(invoice.tax_amount)],
            ["Total:", format_currency(invoice.total)],
        ],
        colWidths=[45 * mm, 30 * mm],
    )
    totals.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
            ]
        )
    )
    wrap = Table([[totals]], colWidths=[174 * mm])
    wrap.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "RIGHT")]))
    story.append(wrap)

    if invoice.notes:
        story.append(Spacer(1, 6 * mm))
        story.append(Paragraph("Notes:", heading))
        story.append(Paragraph(html.escape(invoice.notes).replace("\n", "<br/>"), normal))

    story.append(Spacer(1, 10 * mm))
    story.append(Paragraph(f"Generated on {format_display_date(utc_now())} - {app_name}", footer))

    doc.build(story)
    logger.info("Rendered PDF for invoice %s", invoice.invoice_number)
    return buf.getvalue()
