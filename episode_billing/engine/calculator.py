"""Billing calculation engine.

All monetary calculations done in Python with Decimal precision and rounded
at the point of computation, so persisted amounts stay stable.

Per-minute billing is driven by the delivered episode length; hourly billing
by editing time. Flat rates ignore time entirely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from episode_billing.engine.fees import earned_after_fees, processing_fee
from episode_billing.engine.rates import resolve_rate
from episode_billing.engine.time_calc import decimal_hours, decimal_minutes
from episode_billing.models import (
    Client,
    Invoice,
    Rate,
    RateType,
    TimeEntry,
    quantize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingResult:
    rate: Rate
    billed_quantity: Decimal
    invoiced_amount: Decimal
    processing_fee: Decimal
    earned_after_fees: Decimal


def billed_quantity(
    rate: Rate,
    length: Iterable[TimeEntry],
    editing_time: Iterable[TimeEntry],
) -> Decimal:
    if rate.rate_type is RateType.FLAT_RATE:
        return Decimal("1")
    if rate.rate_type is RateType.PER_MINUTE:
        return decimal_minutes(length)
    return decimal_hours(editing_time)


def calculate_billing(
    rate: Rate,
    length: Iterable[TimeEntry],
    editing_time: Iterable[TimeEntry],
    payment_method: str = "",
) -> BillingResult:
    """Compute billed quantity, invoiced amount, fee and net earnings."""
    quantity = billed_quantity(rate, list(length), list(editing_time))

    if rate.rate_type is RateType.FLAT_RATE:
        amount = quantize(rate.rate)
    else:
        amount = quantize(rate.rate * quantity)

    return BillingResult(
        rate=rate,
        billed_quantity=quantity,
        invoiced_amount=amount,
        processing_fee=processing_fee(amount, payment_method),
        earned_after_fees=earned_after_fees(amount, payment_method),
    )


def bill_invoice(invoice: Invoice, client: Client) -> BillingResult:
    """Resolve the client's rate for the invoice type and bill it.

    Raises RateNotFoundError when the client has no rate for the type.
    """
    rate = resolve_rate(client, invoice.type)
    return calculate_billing(rate, invoice.length, invoice.editing_time, invoice.payment_method)


def apply_billing(invoice: Invoice, client: Client) -> BillingResult:
    """Bill the invoice and write the derived fields back onto it."""
    result = bill_invoice(invoice, client)
    invoice.billed_quantity = result.billed_quantity
    invoice.invoiced_amount = result.invoiced_amount
    invoice.earned_after_fees = result.earned_after_fees
    logger.debug(
        "Billed %r (%s): %s x %s = %s, earned %s",
        invoice.episode_title, result.rate.rate_type.value,
        result.billed_quantity, result.rate.rate, result.invoiced_amount,
        result.earned_after_fees,
    )
    return result


def log_time(
    invoice: Invoice,
    client: Client,
    length: Iterable[TimeEntry] = (),
    editing_time: Iterable[TimeEntry] = (),
    payment_method: Optional[str] = None,
    date_invoiced: Optional[date] = None,
    note: Optional[str] = None,
) -> BillingResult:
    """Append logged time to an episode and re-bill it."""
    invoice.length = list(invoice.length) + list(length)
    invoice.editing_time = list(invoice.editing_time) + list(editing_time)
    if payment_method is not None:
        invoice.payment_method = payment_method
    if date_invoiced is not None:
        invoice.date_invoiced = date_invoiced
    if note is not None:
        invoice.note = note
    invoice.updated_at = datetime.now(timezone.utc)
    return apply_billing(invoice, client)
