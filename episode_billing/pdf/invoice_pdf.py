"""Invoice PDF assembly.

Lays out the business header, bill-to block, invoice date, a single line
item for the episode, the total, and optional payment links. The line item
subtotal is recomputed from the client's current rate.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from episode_billing.config import Settings
from episode_billing.dates import format_long_date
from episode_billing.engine.calculator import bill_invoice
from episode_billing.engine.time_calc import format_duration
from episode_billing.models import Client, Invoice, RateType, format_currency

logger = logging.getLogger(__name__)

GREY = colors.HexColor("#666666")
HEADER_FILL = colors.HexColor("#f3f4f6")
RULE = colors.HexColor("#eeeeee")


@dataclass(frozen=True)
class LineItem:
    item: str
    quantity: str
    rate: Decimal
    subtotal: Decimal


def safe_filename(client: str, episode_title: str) -> str:
    def slug(text: str) -> str:
        text = re.sub(r"[^a-zA-Z0-9\s]", "", text.strip())
        return re.sub(r"\s+", "-", text).lower()

    return f"invoice-{slug(client)}-{slug(episode_title)}.pdf"


def build_line_items(invoice: Invoice, client: Client) -> tuple[str, list[LineItem]]:
    """Return (quantity column label, line items).

    Raises RateNotFoundError when the client has no rate for the episode type.
    """
    result = bill_invoice(invoice, client)
    rate_type = result.rate.rate_type

    if rate_type is RateType.PER_MINUTE:
        quantity = f"{result.billed_quantity}"
    elif rate_type is RateType.HOURLY:
        quantity = format_duration(invoice.editing_time)
    else:
        quantity = "1"

    item = LineItem(
        item=invoice.episode_title,
        quantity=quantity,
        rate=result.rate.rate,
        subtotal=result.invoiced_amount,
    )
    return rate_type.quantity_label, [item]


def payment_links(invoice: Invoice, settings: Settings) -> list[tuple[str, str]]:
    links = []
    if invoice.id:
        links.append(("Pay online", f"{settings.pay_page_base}/{invoice.id}"))
    if settings.VENMO_URL:
        links.append(("Venmo", settings.VENMO_URL))
    if settings.PAYPAL_URL:
        links.append(("PayPal", settings.PAYPAL_URL))
    return links


def render_invoice_pdf(invoice: Invoice, client: Client, settings: Settings) -> bytes:
    """Render the invoice to PDF bytes."""
    qty_label, items = build_line_items(invoice, client)
    total = sum((i.subtotal for i in items), Decimal("0"))

    styles = getSampleStyleSheet()
    company = ParagraphStyle("Company", parent=styles["Heading1"], fontSize=22, spaceAfter=8)
    detail = ParagraphStyle("Detail", parent=styles["Normal"], textColor=GREY)
    bill_to = ParagraphStyle("BillTo", parent=styles["Heading3"], spaceAfter=4)
    centered = ParagraphStyle("Centered", parent=detail, alignment=TA_CENTER, fontSize=12)
    total_style = ParagraphStyle("Total", parent=styles["Heading3"], alignment=TA_RIGHT)

    company_block = [Paragraph(escape(settings.BUSINESS_NAME), company)]
    company_block += [Paragraph(escape(line), detail) for line in settings.BUSINESS_ADDRESS]
    if settings.BUSINESS_PHONE:
        company_block.append(Paragraph(escape(settings.BUSINESS_PHONE), detail))

    bill_to_block = [Paragraph("Bill To:", bill_to), Paragraph(escape(invoice.client), detail)]
    if client.email:
        bill_to_block.append(Paragraph(escape(client.email), detail))

    header = Table([[company_block, bill_to_block]], colWidths=[3.6 * inch, 3.0 * inch])
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))

    rows = [["Item", qty_label, "Rate", "Subtotal"]]
    for item in items:
        rows.append([
            Paragraph(escape(item.item), styles["Normal"]),
            item.quantity,
            format_currency(item.rate),
            format_currency(item.subtotal),
        ])
    grid = Table(rows, colWidths=[2.7 * inch, 1.5 * inch, 1.2 * inch, 1.2 * inch])
    grid.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), GREY),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
        ("LINEBELOW", (0, 1), (-1, -1), 0.5, RULE),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))

    story = [
        header,
        Spacer(1, 0.4 * inch),
        Paragraph(f"Invoice Date: {format_long_date(invoice.date_invoiced)}", centered),
        Spacer(1, 0.3 * inch),
        grid,
        Spacer(1, 0.2 * inch),
        Paragraph(f"Total: {format_currency(total)}", total_style),
        Spacer(1, 0.4 * inch),
    ]

    links = payment_links(invoice, settings)
    if links:
        story.append(Paragraph("Payment options:", bill_to))
        for label, url in links:
            story.append(Paragraph(f'{label}: <link href="{escape(url)}" color="blue">{escape(url)}</link>', detail))
        story.append(Spacer(1, 0.3 * inch))

    story.append(Paragraph("Thanks for your consideration!", centered))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=40, rightMargin=40, topMargin=40, bottomMargin=40,
        title=f"Invoice - {invoice.episode_title}",
        author=settings.BUSINESS_NAME,
    )
    doc.build(story)
    logger.info("Rendered invoice PDF for %r (%s)", invoice.episode_title, format_currency(total))
    return buffer.getvalue()
