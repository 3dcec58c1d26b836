"""Strict validation engine.

Validates invoices before they are billed or persisted.
"""

from __future__ import annotations

from episode_billing.models import Invoice, StrictValidationError

# Anything longer is almost certainly a typo (e.g. minutes entered as hours).
MAX_ENTRY_HOURS = 24


def validate_invoice(invoice: Invoice) -> Invoice:
    """Validate one invoice; returns it unchanged if all checks pass."""
    errors: list[str] = []

    if not invoice.client.strip():
        errors.append("Client name is required")
    if not invoice.episode_title.strip():
        errors.append("Episode title is required")
    if not invoice.type.strip():
        errors.append(f"Episode '{invoice.episode_title}': type is required")

    for label, entries in [("length", invoice.length), ("editing time", invoice.editing_time)]:
        for i, entry in enumerate(entries, start=1):
            if entry.total_seconds > MAX_ENTRY_HOURS * 3600:
                errors.append(
                    f"Episode '{invoice.episode_title}': {label} entry #{i} "
                    f"exceeds {MAX_ENTRY_HOURS} hours ({entry.hours}h {entry.minutes}m {entry.seconds}s)"
                )

    if invoice.invoiced_amount < 0:
        errors.append(
            f"Episode '{invoice.episode_title}': negative invoiced amount={invoice.invoiced_amount}"
        )

    if errors:
        raise StrictValidationError(errors)

    return invoice


def validate_invoices(invoices: list[Invoice]) -> list[Invoice]:
    """Validate a batch, collecting every error before raising."""
    errors: list[str] = []
    for invoice in invoices:
        try:
            validate_invoice(invoice)
        except StrictValidationError as e:
            errors.extend(e.errors)
    if errors:
        raise StrictValidationError(errors)
    return invoices
