"""Hosted checkout sessions for collecting invoice payments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

import stripe

from episode_billing.config import Settings
from episode_billing.models import Invoice, PaymentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


def amount_in_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), ROUND_HALF_UP))


def create_checkout_session(invoice: Invoice, settings: Settings) -> CheckoutSession:
    """Create a one-off checkout session for the invoice's billed amount."""
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentError("Payments are not configured (STRIPE_SECRET_KEY is unset)")
    if invoice.invoiced_amount <= 0:
        raise PaymentError(f"Invoice {invoice.id} has nothing to pay ({invoice.invoiced_amount})")

    stripe.api_key = settings.STRIPE_SECRET_KEY
    base = settings.pay_page_base
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=[{
                "quantity": 1,
                "price_data": {
                    "currency": settings.CURRENCY,
                    "unit_amount": amount_in_cents(invoice.invoiced_amount),
                    "product_data": {"name": f"{invoice.client}: {invoice.episode_title}"},
                },
            }],
            metadata={"invoice_id": invoice.id or ""},
            success_url=f"{base}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base}/{invoice.id}",
        )
    except stripe.StripeError as e:
        logger.error("Checkout session failed for invoice %s: %s", invoice.id, e)
        raise PaymentError(f"Could not create checkout session: {e}") from e

    logger.info("Created checkout session %s for invoice %s", session.id, invoice.id)
    return CheckoutSession(session_id=session.id, url=session.url)
