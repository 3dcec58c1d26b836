"""Streamlit operator UI.

Calls the same core engine as the CLI and API. No business logic here.

    streamlit run episode_billing/ui/app.py
"""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Optional

import streamlit as st

from episode_billing.config import get_settings
from episode_billing.engine import (
    BillingResult,
    format_duration,
    invoice_stats,
    log_time,
    validate_invoice,
)
from episode_billing.models import (
    BillingError,
    Invoice,
    StrictValidationError,
    TimeEntry,
    format_currency,
)
from episode_billing.pdf import render_invoice_pdf, safe_filename
from episode_billing.store import BillingStore

PAYMENT_METHODS = ["Venmo", "PayPal", ""]


@st.cache_resource
def _store() -> BillingStore:
    return BillingStore.from_settings(get_settings())


def _episode_label(invoice: Invoice) -> str:
    status = "paid" if invoice.is_paid else ("invoiced" if invoice.date_invoiced else "open")
    return f"{invoice.client}: {invoice.episode_title} ({status})"


def _time_inputs(prefix: str) -> TimeEntry:
    c1, c2, c3 = st.columns(3)
    hours = c1.number_input("Hours", min_value=0, step=1, key=f"{prefix}_h")
    minutes = c2.number_input("Minutes", min_value=0, step=1, key=f"{prefix}_m")
    seconds = c3.number_input("Seconds", min_value=0, step=1, key=f"{prefix}_s")
    return TimeEntry(hours=int(hours), minutes=int(minutes), seconds=int(seconds))


def save_time_log(
    store: BillingStore,
    invoice: Invoice,
    length: TimeEntry,
    editing: TimeEntry,
    payment_method: str,
    invoiced_on: Optional[date],
    note: str,
) -> tuple[Invoice, BillingResult]:
    """Apply the form to a copy of ``invoice``, validate it and save it.

    The form owns the invoiced date, so ``invoiced_on=None`` clears it.
    ``invoice`` itself is left untouched when validation or the save fails.
    """
    draft = dataclasses.replace(invoice)
    client = store.get_client(draft.client)
    result = log_time(
        draft,
        client,
        length=[length] if length.total_seconds else [],
        editing_time=[editing] if editing.total_seconds else [],
        payment_method=payment_method,
        note=note,
    )
    draft.date_invoiced = invoiced_on
    validate_invoice(draft)
    store.update_invoice(draft)
    return draft, result


def main() -> None:
    st.set_page_config(page_title="Episode Billing", layout="wide")
    st.title("Episode Billing")
    st.markdown("Log editing time against episodes and send invoices.")

    store = _store()
    invoices = [i for i in store.list_invoices() if i.client and i.episode_title]
    if not invoices:
        st.info("No episodes yet. Create one via the API or import a spreadsheet.")
        return

    selected = st.selectbox("Episode", invoices, format_func=_episode_label)
    invoice = store.get_invoice(selected.id)

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Log Time")
        st.caption("Episode length")
        length = _time_inputs("length")
        st.caption("Editing time")
        editing = _time_inputs("editing")

        current = invoice.payment_method if invoice.payment_method in PAYMENT_METHODS else ""
        payment_method = st.selectbox(
            "Payment method", PAYMENT_METHODS,
            index=PAYMENT_METHODS.index(current),
            format_func=lambda m: m or "Other / none",
        )
        invoiced = st.checkbox("Invoiced", value=invoice.date_invoiced is not None)
        invoiced_on = st.date_input("Date invoiced", value=invoice.date_invoiced or date.today())
        note = st.text_input("Note", value=invoice.note)

        if st.button("Save", type="primary"):
            try:
                invoice, result = save_time_log(
                    store,
                    invoice,
                    length,
                    editing,
                    payment_method,
                    invoiced_on if invoiced else None,
                    note,
                )
                st.success(
                    f"Saved. Invoiced {format_currency(result.invoiced_amount)}, "
                    f"earned {format_currency(result.earned_after_fees)}"
                )
            except StrictValidationError as e:
                for err in e.errors:
                    st.error(err)
            except BillingError as e:
                st.error(str(e))

    with col2:
        st.subheader("Billing")
        stats = invoice_stats(invoice)
        st.metric("Invoiced", format_currency(invoice.invoiced_amount))
        st.metric("Earned after fees", format_currency(invoice.earned_after_fees))
        st.write(f"Episode length: {format_duration(invoice.length)}")
        st.write(f"Editing time: {format_duration(invoice.editing_time)}")
        st.write(f"Per billed minute: ${stats.earned_per_billed_minute}")
        st.write(f"Per hour worked: ${stats.earned_per_hour_worked}")

        try:
            client = store.get_client(invoice.client)
            pdf_bytes = render_invoice_pdf(invoice, client, get_settings())
        except BillingError as e:
            st.warning(f"Cannot render invoice: {e}")
        else:
            st.download_button(
                "Download Invoice PDF",
                data=pdf_bytes,
                file_name=safe_filename(invoice.client, invoice.episode_title),
                mime="application/pdf",
            )


if __name__ == "__main__":
    main()
