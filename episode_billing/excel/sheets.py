"""Spreadsheet import/export for episodes.

The legacy episode log lives in a single sheet whose first row holds the
column headers. Columns are located by header name, never by position, so
reordered or partial sheets still import. The sheet is not authoritative;
imported rows go through the document store.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from episode_billing.dates import parse_date
from episode_billing.engine.time_calc import decimal_hours, decimal_minutes, sum_time_entries
from episode_billing.models import Invoice, TimeEntry

logger = logging.getLogger(__name__)

SHEET_TITLE = "Episodes"

# field key -> header text
COLUMNS: list[tuple[str, str]] = [
    ("client", "Client"),
    ("episodeTitle", "Episode Title"),
    ("type", "Type"),
    ("earnedAfterFees", "$ After Fee"),
    ("invoicedAmount", "$ Invoiced"),
    ("billedMinutes", "Billed Minutes"),
    ("lengthHours", "Episode Length Hours"),
    ("lengthMinutes", "Episode Length Minutes"),
    ("lengthSeconds", "Episode Length Seconds"),
    ("paymentMethod", "Payment Method"),
    ("editingHours", "Hours Spent Editing"),
    ("editingMinutes", "Minutes Spent Editing"),
    ("editingSeconds", "Seconds Spent Editing"),
    ("billableHours", "Billable Hours"),
    ("dateInvoiced", "Date Invoiced"),
    ("datePaid", "Date Paid"),
    ("note", "Note"),
]

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)
HEADER_FONT = Font(name='Calibri', size=11, bold=True)
HEADER_FILL = PatternFill(start_color='F3F4F6', end_color='F3F4F6', fill_type='solid')
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
DOLLAR_FORMAT = '_("$"* #,##0.00_);_("$"* \\(#,##0.00\\);_("$"* "-"??_);_(@_)'
NUMBER_FORMAT = '#,##0.00'
DATE_FORMAT = 'm/d/yyyy'

MONEY_KEYS = {"earnedAfterFees", "invoicedAmount"}
DECIMAL_KEYS = {"billedMinutes", "billableHours"}


def _header_key(text: Any) -> str:
    return str(text or "").strip().lower()


def parse_currency(value: Any) -> Decimal:
    """'$1,234.50' -> Decimal('1234.50'); blanks and garbage -> 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    cleaned = re.sub(r"[$,\s]", "", str(value))
    if not cleaned:
        return Decimal("0")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def _parse_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(str(value).strip()))
    except ValueError:
        return 0


def _row_values(invoice: Invoice) -> dict[str, Any]:
    length = sum_time_entries(invoice.length)
    editing = sum_time_entries(invoice.editing_time)

    def as_cell_date(d) -> Optional[datetime]:
        return datetime(d.year, d.month, d.day) if d else None

    return {
        "client": invoice.client,
        "episodeTitle": invoice.episode_title,
        "type": invoice.type,
        "earnedAfterFees": float(invoice.earned_after_fees),
        "invoicedAmount": float(invoice.invoiced_amount),
        "billedMinutes": float(decimal_minutes(invoice.length)),
        "lengthHours": length.hours,
        "lengthMinutes": length.minutes,
        "lengthSeconds": length.seconds,
        "paymentMethod": invoice.payment_method,
        "editingHours": editing.hours,
        "editingMinutes": editing.minutes,
        "editingSeconds": editing.seconds,
        "billableHours": float(decimal_hours(invoice.editing_time)),
        "dateInvoiced": as_cell_date(invoice.date_invoiced),
        "datePaid": as_cell_date(invoice.date_paid),
        "note": invoice.note,
    }


def export_invoices_xlsx(invoices: list[Invoice], output_path: str | Path) -> Path:
    """Write invoices to a fresh workbook with the legacy header row."""
    output_path = Path(output_path)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    for col, (_, header) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER_ALIGN
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col)].width = max(12, len(header) + 2)

    for row_num, invoice in enumerate(invoices, start=2):
        values = _row_values(invoice)
        for col, (key, _) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=row_num, column=col, value=values[key])
            cell.border = THIN_BORDER
            if key in MONEY_KEYS:
                cell.number_format = DOLLAR_FORMAT
            elif key in DECIMAL_KEYS:
                cell.number_format = NUMBER_FORMAT
            elif key in ("dateInvoiced", "datePaid"):
                cell.number_format = DATE_FORMAT

    ws.freeze_panes = "A2"
    wb.save(str(output_path))
    logger.info("Exported %d invoice(s) to %s", len(invoices), output_path)
    return output_path


def import_invoices_xlsx(input_path: str | Path) -> list[Invoice]:
    """Read invoices from the first sheet, locating columns by header name."""
    input_path = Path(input_path)
    wb = openpyxl.load_workbook(str(input_path), data_only=True, read_only=True)
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            raise ValueError(f"No header row found in {input_path.name}")

        wanted = {_header_key(header): key for key, header in COLUMNS}
        column_map: dict[str, int] = {}
        for idx, text in enumerate(header_row):
            key = wanted.get(_header_key(text))
            if key and key not in column_map:
                column_map[key] = idx

        missing = [header for key, header in COLUMNS if key not in column_map]
        if missing:
            logger.warning("Columns missing from %s: %s", input_path.name, ", ".join(missing))

        invoices = []
        for row in rows:
            invoice = _invoice_from_row(row, column_map)
            if invoice is not None:
                invoices.append(invoice)
    finally:
        wb.close()

    logger.info("Imported %d invoice(s) from %s", len(invoices), input_path)
    return invoices


def _invoice_from_row(row: tuple, column_map: dict[str, int]) -> Optional[Invoice]:
    def get(key: str) -> Any:
        idx = column_map.get(key)
        if idx is None or idx >= len(row):
            return None
        return row[idx]

    def text(key: str) -> str:
        value = get(key)
        return "" if value is None else str(value).strip()

    if not text("client") and not text("episodeTitle"):
        return None

    return Invoice(
        client=text("client"),
        episode_title=text("episodeTitle"),
        type=text("type"),
        length=[TimeEntry(
            hours=_parse_int(get("lengthHours")),
            minutes=_parse_int(get("lengthMinutes")),
            seconds=_parse_int(get("lengthSeconds")),
        )],
        editing_time=[TimeEntry(
            hours=_parse_int(get("editingHours")),
            minutes=_parse_int(get("editingMinutes")),
            seconds=_parse_int(get("editingSeconds")),
        )],
        billed_quantity=parse_currency(get("billedMinutes")),
        invoiced_amount=parse_currency(get("invoicedAmount")),
        payment_method=text("paymentMethod"),
        earned_after_fees=parse_currency(get("earnedAfterFees")),
        date_invoiced=parse_date(get("dateInvoiced")),
        date_paid=parse_date(get("datePaid")),
        note=text("note"),
    )
