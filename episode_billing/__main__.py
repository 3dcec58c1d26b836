"""CLI entry point.

Usage:
    python -m episode_billing bill --rate-type "Per delivered minute" --rate 1.25 --length 45:30
    python -m episode_billing log-time <invoice-id> --editing 1:30:00 --payment-method Venmo
    python -m episode_billing pdf <invoice-id> --out invoice.pdf
    python -m episode_billing import-sheet Episodes.xlsx --replace
    python -m episode_billing setup-clients clients.json
"""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import typer

from episode_billing.config import get_settings
from episode_billing.models import (
    BillingError,
    Client,
    Rate,
    RateType,
    StrictValidationError,
    TimeEntry,
    format_currency,
)

app = typer.Typer(help="Episode billing: time logging, invoices and payments.")


def parse_time(text: str) -> TimeEntry:
    """'1:45:00' -> 1h45m0s, '45:30' -> 45m30s, '90' -> 90m."""
    try:
        numbers = [int(p) for p in text.strip().split(":")]
        if len(numbers) == 3:
            return TimeEntry(hours=numbers[0], minutes=numbers[1], seconds=numbers[2])
        if len(numbers) == 2:
            return TimeEntry(minutes=numbers[0], seconds=numbers[1])
        if len(numbers) == 1:
            return TimeEntry(minutes=numbers[0])
    except ValueError:
        pass
    raise typer.BadParameter(f"Invalid time '{text}', expected H:MM:SS, MM:SS or minutes")


def _store():
    from episode_billing.store import BillingStore
    return BillingStore.from_settings(get_settings())


def _fail(message: str) -> None:
    typer.echo(f"ERROR: {message}", err=True)
    raise typer.Exit(1)


def _report_validation_errors(errors: list[str]) -> None:
    typer.echo("\nSTRICT VALIDATION FAILED:", err=True)
    for error in errors:
        typer.echo(f"  ERROR: {error}", err=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    level = logging.DEBUG if verbose else get_settings().LOG_LEVEL
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def bill(
    rate_type: str = typer.Option(..., "--rate-type", help="Per delivered minute | Hourly | Flat rate"),
    rate: str = typer.Option(..., "--rate", help="Rate in dollars"),
    length: List[str] = typer.Option([], "--length", help="Episode length entry (repeatable)"),
    editing: List[str] = typer.Option([], "--editing", help="Editing time entry (repeatable)"),
    payment_method: str = typer.Option("", "--payment-method", help="Venmo, PayPal, or blank"),
) -> None:
    """Compute billing offline, without touching the store."""
    from episode_billing.engine import calculate_billing

    try:
        parsed_rate = Rate(episode_type="-", rate_type=RateType.parse(rate_type), rate=Decimal(rate))
    except (ValueError, InvalidOperation) as e:
        _fail(f"Invalid rate: {e}")

    result = calculate_billing(
        parsed_rate,
        [parse_time(t) for t in length],
        [parse_time(t) for t in editing],
        payment_method,
    )
    typer.echo(f"Rate:        {result.rate.rate_type.value} @ {format_currency(result.rate.rate)}")
    typer.echo(f"Quantity:    {result.billed_quantity} {result.rate.rate_type.quantity_label.lower()}")
    typer.echo(f"Invoiced:    {format_currency(result.invoiced_amount)}")
    typer.echo(f"Fee:         {format_currency(result.processing_fee)}")
    typer.echo(f"Earned:      {format_currency(result.earned_after_fees)}")


@app.command("log-time")
def log_time_cmd(
    invoice_id: str = typer.Argument(..., help="Invoice id"),
    length: List[str] = typer.Option([], "--length", help="Episode length entry (repeatable)"),
    editing: List[str] = typer.Option([], "--editing", help="Editing time entry (repeatable)"),
    payment_method: Optional[str] = typer.Option(None, "--payment-method"),
    invoiced_on: Optional[str] = typer.Option(None, "--invoiced-on", help="Date invoiced (YYYY-MM-DD)"),
    note: Optional[str] = typer.Option(None, "--note"),
) -> None:
    """Append time to an episode and re-bill it."""
    from episode_billing.engine import log_time, validate_invoice

    store = _store()
    try:
        invoice = store.get_invoice(invoice_id)
        client = store.get_client(invoice.client)
        result = log_time(
            invoice,
            client,
            length=[parse_time(t) for t in length],
            editing_time=[parse_time(t) for t in editing],
            payment_method=payment_method,
            date_invoiced=date.fromisoformat(invoiced_on) if invoiced_on else None,
            note=note,
        )
        validate_invoice(invoice)
        store.update_invoice(invoice)
    except StrictValidationError as e:
        _report_validation_errors(e.errors)
        typer.echo("\nNothing saved.", err=True)
        raise typer.Exit(1)
    except (BillingError, ValueError) as e:
        _fail(str(e))

    typer.echo(f"{invoice.client}: {invoice.episode_title}")
    typer.echo(
        f"  Billed: {result.billed_quantity} x {format_currency(result.rate.rate)}"
        f" = {format_currency(result.invoiced_amount)}"
    )
    typer.echo(f"  Earned after fees: {format_currency(result.earned_after_fees)}")


@app.command()
def pdf(
    invoice_id: str = typer.Argument(..., help="Invoice id"),
    out: Optional[str] = typer.Option(None, "--out", help="Output PDF path"),
) -> None:
    """Render an invoice PDF."""
    from episode_billing.pdf import render_invoice_pdf, safe_filename

    store = _store()
    try:
        invoice = store.get_invoice(invoice_id)
        client = store.get_client(invoice.client)
        data = render_invoice_pdf(invoice, client, get_settings())
    except BillingError as e:
        _fail(str(e))

    out_path = Path(out or safe_filename(invoice.client, invoice.episode_title))
    out_path.write_bytes(data)
    typer.echo(f"Invoice saved to: {out_path}")


@app.command()
def stats(invoice_id: str = typer.Argument(..., help="Invoice id")) -> None:
    """Show earnings per billed minute and per hour worked."""
    from episode_billing.engine import invoice_stats

    try:
        invoice = _store().get_invoice(invoice_id)
    except BillingError as e:
        _fail(str(e))

    s = invoice_stats(invoice)
    typer.echo(f"{invoice.client}: {invoice.episode_title}")
    typer.echo(f"  Earned after fees:   {format_currency(invoice.earned_after_fees)}")
    typer.echo(f"  Per billed minute:   ${s.earned_per_billed_minute} ({s.billed_minutes} min)")
    typer.echo(f"  Per hour worked:     ${s.earned_per_hour_worked} ({s.editing_hours} h)")


@app.command("export-sheet")
def export_sheet(out: str = typer.Option("Episodes.xlsx", "--out", help="Output .xlsx path")) -> None:
    """Export every episode to a spreadsheet."""
    from episode_billing.excel import export_invoices_xlsx

    invoices = _store().list_invoices()
    path = export_invoices_xlsx(invoices, out)
    typer.echo(f"Exported {len(invoices)} episode(s) to: {path}")


@app.command("import-sheet")
def import_sheet(
    path: str = typer.Argument(..., help="Spreadsheet (.xlsx) to import"),
    replace: bool = typer.Option(False, "--replace", help="Delete existing episodes first"),
    strict: bool = typer.Option(True, "--strict/--no-strict", help="Enable strict validation (default: True)"),
) -> None:
    """Import episodes from a spreadsheet into the store."""
    from episode_billing.engine import validate_invoices
    from episode_billing.excel import import_invoices_xlsx

    typer.echo(f"Reading: {path}")
    try:
        invoices = import_invoices_xlsx(path)
    except ValueError as e:
        _fail(str(e))
    typer.echo(f"  {len(invoices)} row(s) read")

    try:
        validate_invoices(invoices)
    except StrictValidationError as e:
        _report_validation_errors(e.errors)
        if strict:
            typer.echo("\nNothing imported (strict mode).", err=True)
            raise typer.Exit(1)
        typer.echo("\nWARNING: Continuing in non-strict mode...", err=True)

    store = _store()
    count = store.replace_invoices(invoices) if replace else store.insert_invoices(invoices)
    updated, skipped = store.link_invoices_to_clients()
    typer.echo(f"Imported {count} episode(s); linked {updated}, {skipped} without a matching client")


@app.command("setup-clients")
def setup_clients(config_file: str = typer.Argument(..., help="JSON list of clients")) -> None:
    """Create or update clients, then link existing episodes to them.

    Each client: {"name", "email", "aliases": [...], "rates": [{"episodeType", "rateType", "rate"}]}
    """
    try:
        data = json.loads(Path(config_file).read_text(encoding='utf-8'))
        clients = [Client.from_document(d) for d in data]
    except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
        _fail(f"Invalid client config: {e}")

    store = _store()
    for client in clients:
        store.upsert_client(client)
        typer.echo(f"  {client.name}: {len(client.rates)} rate(s), aliases {client.aliases}")

    updated, skipped = store.link_invoices_to_clients()
    typer.echo(f"Linked {updated} episode(s); skipped {skipped} with no matching client")


@app.command()
def report(out: Optional[str] = typer.Option(None, "--out", help="Write JSON report to this path")) -> None:
    """Summarise earnings across all episodes."""
    from episode_billing.report import DecimalEncoder, generate_report, generate_report_dict

    invoices = _store().list_invoices()
    if out:
        path = generate_report(invoices, out)
        typer.echo(f"Report saved to: {path}")
        return

    typer.echo(json.dumps(generate_report_dict(invoices), indent=2, cls=DecimalEncoder))


if __name__ == "__main__":
    app()
