"""Tests for the command line interface."""

import json

import openpyxl
import pytest
import typer
from decimal import Decimal
from typer.testing import CliRunner

import episode_billing.__main__ as cli
from episode_billing.models import Client, Invoice, Rate, RateType, TimeEntry

runner = CliRunner()


def _make_client() -> Client:
    return Client(
        name="Acme Podcasts",
        aliases=["Acme"],
        rates=[Rate("Podcast", RateType.PER_MINUTE, Decimal("1.25"))],
    )


def _write_sheet(path, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(str(path))
    return path


@pytest.fixture
def cli_store(store, monkeypatch):
    monkeypatch.setattr(cli, "_store", lambda: store)
    return store


class TestParseTime:
    def test_formats(self):
        assert cli.parse_time("1:45:00") == TimeEntry(hours=1, minutes=45)
        assert cli.parse_time("45:30") == TimeEntry(minutes=45, seconds=30)
        assert cli.parse_time("90") == TimeEntry(minutes=90)

    def test_invalid(self):
        with pytest.raises(typer.BadParameter):
            cli.parse_time("abc")
        with pytest.raises(typer.BadParameter):
            cli.parse_time("1:2:3:4")
        with pytest.raises(typer.BadParameter):
            cli.parse_time("-5")


class TestBill:
    def test_per_minute_with_venmo(self):
        result = runner.invoke(cli.app, [
            "bill", "--rate-type", "Per delivered minute", "--rate", "1.25",
            "--length", "40:00", "--length", "5:30", "--payment-method", "Venmo",
        ])
        assert result.exit_code == 0, result.output
        assert "Quantity:    45.50 minutes" in result.output
        assert "Invoiced:    $56.88" in result.output
        assert "Earned:      $55.70" in result.output

    def test_hourly(self):
        result = runner.invoke(cli.app, [
            "bill", "--rate-type", "per-hour", "--rate", "47", "--editing", "1:45:00",
        ])
        assert result.exit_code == 0, result.output
        assert "Rate:        Hourly @ $47.00" in result.output
        assert "Invoiced:    $82.25" in result.output

    def test_invalid_rate(self):
        result = runner.invoke(cli.app, ["bill", "--rate-type", "Hourly", "--rate", "lots"])
        assert result.exit_code == 1

    def test_invalid_time(self):
        result = runner.invoke(cli.app, [
            "bill", "--rate-type", "Hourly", "--rate", "47", "--editing", "soon",
        ])
        assert result.exit_code != 0


class TestStoreCommands:
    def test_log_time(self, cli_store):
        cli_store.upsert_client(_make_client())
        invoice = cli_store.create_invoice(Invoice(client="Acme", episode_title="Ep 1", type="Podcast"))
        result = runner.invoke(cli.app, ["log-time", invoice.id, "--length", "45:30", "--invoiced-on", "2026-01-10"])
        assert result.exit_code == 0, result.output
        assert "$56.88" in result.output
        saved = cli_store.get_invoice(invoice.id)
        assert saved.invoiced_amount == Decimal("56.88")
        assert saved.date_invoiced.isoformat() == "2026-01-10"

    def test_log_time_rejects_oversized_entry(self, cli_store):
        cli_store.upsert_client(_make_client())
        invoice = cli_store.create_invoice(Invoice(client="Acme", episode_title="Ep 1", type="Podcast"))
        result = runner.invoke(cli.app, ["log-time", invoice.id, "--editing", "30:00:00"])
        assert result.exit_code == 1
        assert "STRICT VALIDATION FAILED" in result.output
        assert "exceeds 24 hours" in result.output
        assert "Nothing saved." in result.output
        saved = cli_store.get_invoice(invoice.id)
        assert saved.editing_time == []
        assert saved.invoiced_amount == Decimal("0")

    def test_log_time_hourly_rate_formatting(self, cli_store):
        cli_store.upsert_client(Client(
            name="Deep Dive",
            rates=[Rate("Interview", RateType.HOURLY, Decimal("47"))],
        ))
        invoice = cli_store.create_invoice(Invoice(client="Deep Dive", episode_title="Ep 9", type="Interview"))
        result = runner.invoke(cli.app, ["log-time", invoice.id, "--editing", "1:45:00"])
        assert result.exit_code == 0, result.output
        assert "x $47.00 = $82.25" in result.output
        assert "$47.0 " not in result.output

    def test_log_time_unknown_invoice(self, cli_store):
        result = runner.invoke(cli.app, ["log-time", "not-an-id", "--length", "5:00"])
        assert result.exit_code == 1
        assert "Invoice not found" in result.output

    def test_setup_clients(self, cli_store, tmp_path):
        config = tmp_path / "clients.json"
        config.write_text(json.dumps([
            {"name": "Acme Podcasts", "aliases": ["Acme"],
             "rates": [{"episodeType": "Podcast", "rateType": "per-minute", "rate": 1.25}]},
        ]), encoding='utf-8')
        result = runner.invoke(cli.app, ["setup-clients", str(config)])
        assert result.exit_code == 0, result.output
        assert cli_store.get_client("Acme").rates[0].rate == Decimal("1.25")

    def test_import_sheet(self, cli_store, tmp_path):
        cli_store.upsert_client(_make_client())
        path = _write_sheet(tmp_path / "Episodes.xlsx", [
            ["Client", "Episode Title", "Type", "$ Invoiced"],
            ["Acme", "Ep 1", "Podcast", "$56.88"],
        ])
        result = runner.invoke(cli.app, ["import-sheet", str(path)])
        assert result.exit_code == 0, result.output
        assert "Imported 1 episode(s); linked 1, 0 without a matching client" in result.output
        assert len(cli_store.list_invoices()) == 1

    def test_import_sheet_strict_failure(self, cli_store, tmp_path):
        path = _write_sheet(tmp_path / "Episodes.xlsx", [
            ["Client", "Episode Title", "Type"],
            ["Acme", "Ep 1", ""],
        ])
        result = runner.invoke(cli.app, ["import-sheet", str(path)])
        assert result.exit_code == 1
        assert "STRICT VALIDATION FAILED" in result.output
        assert cli_store.list_invoices() == []

    def test_import_sheet_non_strict(self, cli_store, tmp_path):
        path = _write_sheet(tmp_path / "Episodes.xlsx", [
            ["Client", "Episode Title", "Type"],
            ["Acme", "Ep 1", ""],
        ])
        result = runner.invoke(cli.app, ["import-sheet", str(path), "--no-strict"])
        assert result.exit_code == 0, result.output
        assert len(cli_store.list_invoices()) == 1

    def test_report(self, cli_store, tmp_path):
        cli_store.upsert_client(_make_client())
        cli_store.create_invoice(Invoice(
            client="Acme Podcasts", episode_title="Ep 1", type="Podcast",
            invoiced_amount=Decimal("56.88"), earned_after_fees=Decimal("56.88"),
        ))
        out = tmp_path / "report.json"
        result = runner.invoke(cli.app, ["report", "--out", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding='utf-8'))["summary"]["invoiced"] == 56.88

    def test_report_to_stdout(self, cli_store):
        cli_store.upsert_client(_make_client())
        cli_store.create_invoice(Invoice(
            client="Acme Podcasts", episode_title="Ep 1", type="Podcast",
            invoiced_amount=Decimal("56.88"), earned_after_fees=Decimal("55.70"),
        ))
        result = runner.invoke(cli.app, ["report"])
        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout)["summary"]
        assert summary["invoiced"] == 56.88
        assert summary["fees"] == 1.18
