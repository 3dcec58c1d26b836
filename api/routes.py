"""API routes for Episode Billing."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from episode_billing.config import Settings, get_settings
from episode_billing.dates import parse_date
from episode_billing.engine import apply_billing, invoice_stats, log_time, validate_invoice
from episode_billing.models import Invoice
from episode_billing.payments import create_checkout_session
from episode_billing.pdf import render_invoice_pdf, safe_filename
from episode_billing.store import BillingStore

from api.deps import get_store, require_api_key
from api.schemas import (
    CheckoutResponse,
    ClientOut,
    InvoiceCreate,
    InvoiceList,
    InvoiceOut,
    InvoiceUpdate,
    SavedResponse,
    StatsOut,
    TimeLogRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")
pay_router = APIRouter(prefix="/pay")


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/invoices", response_model=InvoiceList)
def list_invoices(store: BillingStore = Depends(get_store)):
    """All episodes, most recently invoiced first."""
    return InvoiceList(invoices=[InvoiceOut.from_invoice(i) for i in store.list_invoices()])


@router.post("/invoices", response_model=SavedResponse, dependencies=[Depends(require_api_key)])
def create_invoice(body: InvoiceCreate, store: BillingStore = Depends(get_store)):
    """Create an episode and bill whatever time it starts with."""
    invoice = Invoice(
        client=body.client.strip(),
        episode_title=body.episode_title.strip(),
        type=body.type.strip(),
        length=[e.to_entry() for e in body.length],
        editing_time=[e.to_entry() for e in body.editing_time],
        payment_method=body.payment_method,
        date_invoiced=parse_date(body.date_invoiced),
        date_paid=parse_date(body.date_paid),
        note=body.note,
    )
    validate_invoice(invoice)
    client = store.get_client(invoice.client)
    apply_billing(invoice, client)
    store.create_invoice(invoice)
    return SavedResponse(id=invoice.id)


@router.get("/invoices/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: str, store: BillingStore = Depends(get_store)):
    return InvoiceOut.from_invoice(store.get_invoice(invoice_id))


@router.put("/invoices/{invoice_id}", response_model=InvoiceOut, dependencies=[Depends(require_api_key)])
def update_invoice(invoice_id: str, body: InvoiceUpdate, store: BillingStore = Depends(get_store)):
    """Apply a partial edit, then recompute every derived amount."""
    invoice = store.get_invoice(invoice_id)
    changes = body.model_dump(exclude_unset=True)

    for attr in ("client", "episode_title", "type", "payment_method", "note"):
        if changes.get(attr) is not None:
            setattr(invoice, attr, changes[attr])
    if body.length is not None:
        invoice.length = [e.to_entry() for e in body.length]
    if body.editing_time is not None:
        invoice.editing_time = [e.to_entry() for e in body.editing_time]
    if "date_invoiced" in changes:
        invoice.date_invoiced = parse_date(body.date_invoiced)
    if "date_paid" in changes:
        invoice.date_paid = parse_date(body.date_paid)

    validate_invoice(invoice)
    client = store.get_client(invoice.client)
    apply_billing(invoice, client)
    store.update_invoice(invoice)
    return InvoiceOut.from_invoice(invoice)


@router.delete("/invoices/{invoice_id}", response_model=SavedResponse, dependencies=[Depends(require_api_key)])
def delete_invoice(invoice_id: str, store: BillingStore = Depends(get_store)):
    store.delete_invoice(invoice_id)
    return SavedResponse(id=invoice_id)


@router.post("/invoices/{invoice_id}/time", response_model=InvoiceOut, dependencies=[Depends(require_api_key)])
def log_invoice_time(invoice_id: str, body: TimeLogRequest, store: BillingStore = Depends(get_store)):
    """Append length and editing entries to an episode and re-bill it."""
    invoice = store.get_invoice(invoice_id)
    client = store.get_client(invoice.client)
    log_time(
        invoice,
        client,
        length=[e.to_entry() for e in body.length],
        editing_time=[e.to_entry() for e in body.editing_time],
        payment_method=body.payment_method,
        date_invoiced=parse_date(body.date_invoiced),
        note=body.note,
    )
    validate_invoice(invoice)
    store.update_invoice(invoice)
    return InvoiceOut.from_invoice(invoice)


@router.get("/invoices/{invoice_id}/stats", response_model=StatsOut)
def get_invoice_stats(invoice_id: str, store: BillingStore = Depends(get_store)):
    invoice = store.get_invoice(invoice_id)
    return StatsOut.from_stats(invoice, invoice_stats(invoice))


@router.get("/invoices/{invoice_id}/pdf")
def get_invoice_pdf(
    invoice_id: str,
    store: BillingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Download the invoice as a PDF attachment."""
    invoice = store.get_invoice(invoice_id)
    client = store.get_client(invoice.client)
    data = render_invoice_pdf(invoice, client, settings)
    filename = safe_filename(invoice.client, invoice.episode_title)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={filename}; filename*=UTF-8''{quote(filename)}",
        },
    )


@router.post("/invoices/{invoice_id}/checkout", response_model=CheckoutResponse)
def create_checkout(
    invoice_id: str,
    store: BillingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Start a hosted checkout for the invoice's billed amount."""
    invoice = store.get_invoice(invoice_id)
    session = create_checkout_session(invoice, settings)
    return CheckoutResponse(session_id=session.session_id, url=session.url)


@router.get("/clients/{name}", response_model=ClientOut)
def get_client(name: str, store: BillingStore = Depends(get_store)):
    """Look a client up by name or alias."""
    return ClientOut.from_client(store.get_client(name))


@pay_router.get("/success", response_class=HTMLResponse)
def payment_success(session_id: str | None = None):
    logger.info("Checkout completed (session %s)", session_id)
    return HTMLResponse(
        "<html><body style='font-family: sans-serif; text-align: center; padding: 4em;'>"
        "<h1>Payment received</h1><p>Thank you! A receipt is on its way.</p>"
        "</body></html>"
    )


@pay_router.get("/{invoice_id}")
def pay_invoice(
    invoice_id: str,
    store: BillingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Client-facing link: redirect straight to the hosted checkout page."""
    invoice = store.get_invoice(invoice_id)
    session = create_checkout_session(invoice, settings)
    return RedirectResponse(session.url, status_code=303)
