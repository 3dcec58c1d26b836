"""Tests for spreadsheet import/export."""

import pytest
from datetime import date, datetime
from decimal import Decimal

import openpyxl

from episode_billing.excel.sheets import (
    COLUMNS,
    SHEET_TITLE,
    export_invoices_xlsx,
    import_invoices_xlsx,
    parse_currency,
)
from episode_billing.models import Invoice, TimeEntry


def _make_invoice(**kwargs) -> Invoice:
    defaults = dict(
        client="Acme Podcasts",
        episode_title="Ep 1",
        type="Podcast",
        length=[TimeEntry(minutes=40), TimeEntry(minutes=5, seconds=30)],
        editing_time=[TimeEntry(hours=1, minutes=45)],
        billed_quantity=Decimal("45.50"),
        invoiced_amount=Decimal("56.88"),
        payment_method="Venmo",
        earned_after_fees=Decimal("55.70"),
        date_invoiced=date(2026, 1, 10),
        note="rush job",
    )
    defaults.update(kwargs)
    return Invoice(**defaults)


def _write_sheet(path, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(str(path))
    return path


@pytest.fixture
def tmp_output(tmp_path):
    return tmp_path / "Episodes.xlsx"


class TestParseCurrency:
    def test_formatted(self):
        assert parse_currency("$1,234.50") == Decimal("1234.50")
        assert parse_currency(" $ 12 ") == Decimal("12")

    def test_numbers(self):
        assert parse_currency(56.88) == Decimal("56.88")
        assert parse_currency(3) == Decimal("3")

    def test_blank_and_garbage(self):
        assert parse_currency(None) == Decimal("0")
        assert parse_currency("") == Decimal("0")
        assert parse_currency("n/a") == Decimal("0")


class TestExport:
    def test_header_row(self, tmp_output):
        export_invoices_xlsx([_make_invoice()], tmp_output)
        ws = openpyxl.load_workbook(str(tmp_output)).active
        assert ws.title == SHEET_TITLE
        headers = [ws.cell(row=1, column=c).value for c in range(1, len(COLUMNS) + 1)]
        assert headers == [header for _, header in COLUMNS]

    def test_row_values(self, tmp_output):
        export_invoices_xlsx([_make_invoice()], tmp_output)
        ws = openpyxl.load_workbook(str(tmp_output)).active
        row = {ws.cell(row=1, column=c).value: ws.cell(row=2, column=c).value for c in range(1, len(COLUMNS) + 1)}
        assert row["Client"] == "Acme Podcasts"
        assert row["$ Invoiced"] == 56.88
        assert row["Episode Length Minutes"] == 45
        assert row["Episode Length Seconds"] == 30
        assert row["Hours Spent Editing"] == 1
        assert row["Billed Minutes"] == 45.5
        assert row["Billable Hours"] == 1.75
        assert row["Date Invoiced"] == datetime(2026, 1, 10)
        assert row["Date Paid"] is None

    def test_billed_minutes_for_hourly_episode(self, tmp_output):
        # Hourly episodes bill editing hours, but the column still shows delivered minutes.
        invoice = _make_invoice(
            type="Interview",
            length=[TimeEntry(minutes=30)],
            billed_quantity=Decimal("1.75"),
            invoiced_amount=Decimal("82.25"),
        )
        export_invoices_xlsx([invoice], tmp_output)
        ws = openpyxl.load_workbook(str(tmp_output)).active
        row = {ws.cell(row=1, column=c).value: ws.cell(row=2, column=c).value for c in range(1, len(COLUMNS) + 1)}
        assert row["Billed Minutes"] == 30
        assert row["Billable Hours"] == 1.75

    def test_export_then_import(self, tmp_output):
        export_invoices_xlsx([_make_invoice()], tmp_output)
        [invoice] = import_invoices_xlsx(tmp_output)
        assert invoice.client == "Acme Podcasts"
        assert invoice.length == [TimeEntry(minutes=45, seconds=30)]
        assert invoice.editing_time == [TimeEntry(hours=1, minutes=45)]
        assert invoice.invoiced_amount == Decimal("56.88")
        assert invoice.date_invoiced == date(2026, 1, 10)
        assert invoice.note == "rush job"


class TestImport:
    def test_columns_located_by_header(self, tmp_path):
        path = _write_sheet(tmp_path / "legacy.xlsx", [
            ["Note", " episode title ", "$ Invoiced", "Client", "Date Invoiced", "Minutes Spent Editing"],
            ["", "Ep 7", "$1,234.50", "Beta Audio", "1/10/2026", "90"],
        ])
        [invoice] = import_invoices_xlsx(path)
        assert invoice.client == "Beta Audio"
        assert invoice.episode_title == "Ep 7"
        assert invoice.invoiced_amount == Decimal("1234.50")
        assert invoice.date_invoiced == date(2026, 1, 10)
        assert invoice.editing_time == [TimeEntry(minutes=90)]
        assert invoice.type == ""

    def test_blank_rows_skipped(self, tmp_path):
        path = _write_sheet(tmp_path / "legacy.xlsx", [
            ["Client", "Episode Title", "Type"],
            ["Acme", "Ep 1", "Podcast"],
            [None, None, "Podcast"],
            ["Acme", "Ep 2", "Podcast"],
        ])
        invoices = import_invoices_xlsx(path)
        assert [i.episode_title for i in invoices] == ["Ep 1", "Ep 2"]

    def test_unparsable_date(self, tmp_path):
        path = _write_sheet(tmp_path / "legacy.xlsx", [
            ["Client", "Episode Title", "Date Paid"],
            ["Acme", "Ep 1", "pending"],
        ])
        [invoice] = import_invoices_xlsx(path)
        assert invoice.date_paid is None
