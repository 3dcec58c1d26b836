"""Tests for strict validation engine."""

import pytest
from decimal import Decimal

from episode_billing.engine.validator import validate_invoice, validate_invoices
from episode_billing.models import Invoice, StrictValidationError, TimeEntry


def _make_invoice(**kwargs) -> Invoice:
    defaults = dict(
        client="Acme Podcasts",
        episode_title="Ep 1",
        type="Podcast",
        length=[TimeEntry(minutes=45)],
        editing_time=[TimeEntry(hours=2)],
    )
    defaults.update(kwargs)
    return Invoice(**defaults)


class TestValidator:
    def test_valid_invoice_passes(self):
        invoice = _make_invoice()
        assert validate_invoice(invoice) is invoice

    def test_missing_client(self):
        with pytest.raises(StrictValidationError) as exc_info:
            validate_invoice(_make_invoice(client="  "))
        assert any("Client name is required" in e for e in exc_info.value.errors)

    def test_missing_title_and_type(self):
        with pytest.raises(StrictValidationError) as exc_info:
            validate_invoice(_make_invoice(episode_title="", type=""))
        assert len(exc_info.value.errors) == 2

    def test_entry_over_24_hours(self):
        with pytest.raises(StrictValidationError, match="exceeds 24 hours"):
            validate_invoice(_make_invoice(editing_time=[TimeEntry(hours=25)]))

    def test_exactly_24_hours_ok(self):
        validate_invoice(_make_invoice(editing_time=[TimeEntry(hours=24)]))

    def test_total_over_24_hours_ok(self):
        validate_invoice(_make_invoice(editing_time=[TimeEntry(hours=20), TimeEntry(hours=20)]))

    def test_negative_amount(self):
        with pytest.raises(StrictValidationError, match="negative invoiced amount"):
            validate_invoice(_make_invoice(invoiced_amount=Decimal("-5")))

    def test_batch_collects_all_errors(self):
        invoices = [
            _make_invoice(),
            _make_invoice(episode_title="Ep 2", type=""),
            _make_invoice(episode_title="Ep 3", length=[TimeEntry(hours=30)]),
        ]
        with pytest.raises(StrictValidationError) as exc_info:
            validate_invoices(invoices)
        assert len(exc_info.value.errors) == 2
        assert "2 error(s)" in str(exc_info.value)
