"""Tests for canonical data models."""

import pytest
from decimal import Decimal
from datetime import date, datetime

from episode_billing.models import (
    Client,
    ClientNotFoundError,
    Invoice,
    Rate,
    RateNotFoundError,
    RateType,
    StrictValidationError,
    TimeEntry,
    format_currency,
    quantize,
    to_decimal,
)


class TestRateType:
    def test_stored_labels(self):
        assert RateType.parse("Per delivered minute") is RateType.PER_MINUTE
        assert RateType.parse("Hourly") is RateType.HOURLY
        assert RateType.parse("Flat rate") is RateType.FLAT_RATE

    def test_legacy_labels_case_insensitive(self):
        assert RateType.parse("per-minute") is RateType.PER_MINUTE
        assert RateType.parse("Per-Hour") is RateType.HOURLY
        assert RateType.parse(" per-episode ") is RateType.FLAT_RATE

    def test_unknown_label_raises(self):
        with pytest.raises(ValueError, match="Unknown rate type"):
            RateType.parse("Per word")

    def test_quantity_labels(self):
        assert RateType.PER_MINUTE.quantity_label == "Minutes"
        assert RateType.HOURLY.quantity_label == "Hours"
        assert RateType.FLAT_RATE.quantity_label == "Qty"


class TestTimeEntry:
    def test_total_seconds(self):
        assert TimeEntry(hours=1, minutes=2, seconds=3).total_seconds == 3723

    def test_negative_raises(self):
        with pytest.raises(ValueError, match="must not be negative"):
            TimeEntry(minutes=-5)

    def test_from_document_blanks(self):
        entry = TimeEntry.from_document({"hours": None, "minutes": 30})
        assert entry == TimeEntry(minutes=30)


class TestRate:
    def test_negative_rate_raises(self):
        with pytest.raises(ValueError, match="must not be negative"):
            Rate(episode_type="Podcast", rate_type=RateType.HOURLY, rate=Decimal("-1"))

    def test_from_document(self):
        rate = Rate.from_document({"episodeType": "Podcast", "rateType": "per-minute", "rate": 1.25})
        assert rate.rate_type is RateType.PER_MINUTE
        assert rate.rate == Decimal("1.25")


class TestClient:
    def test_document_omits_missing_email(self):
        assert "email" not in Client(name="Acme").to_document()


class TestInvoiceDocument:
    def test_to_document_camel_case(self):
        invoice = Invoice(
            client="Acme",
            episode_title="Ep 1",
            type="Podcast",
            length=[TimeEntry(minutes=45, seconds=30)],
            billed_quantity=Decimal("45.50"),
            invoiced_amount=Decimal("56.88"),
            date_invoiced=date(2026, 1, 10),
        )
        doc = invoice.to_document()
        assert doc["episodeTitle"] == "Ep 1"
        assert doc["length"] == [{"hours": 0, "minutes": 45, "seconds": 30}]
        assert doc["billedQuantity"] == 45.5
        assert doc["invoicedAmount"] == 56.88
        assert doc["dateInvoiced"] == datetime(2026, 1, 10)
        assert doc["datePaid"] is None
        assert "createdAt" not in doc

    def test_from_legacy_document(self):
        doc = {
            "_id": "abc123",
            "client": "Acme",
            "episodeTitle": "Ep 2",
            "type": "Podcast",
            "length": {"hours": 0, "minutes": 30, "seconds": 0},
            "billedMinutes": 30,
            "invoicedAmount": "37.50",
            "dateInvoiced": "1/10/2026",
            "datePaid": "not a date",
        }
        invoice = Invoice.from_document(doc)
        assert invoice.id == "abc123"
        assert invoice.length == [TimeEntry(minutes=30)]
        assert invoice.editing_time == []
        assert invoice.billed_quantity == Decimal("30")
        assert invoice.invoiced_amount == Decimal("37.50")
        assert invoice.date_invoiced == date(2026, 1, 10)
        assert invoice.date_paid is None
        assert not invoice.is_paid


class TestHelpers:
    def test_quantize_half_up(self):
        assert quantize(Decimal("56.875")) == Decimal("56.88")
        assert quantize(Decimal("2.385")) == Decimal("2.39")

    def test_to_decimal(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")
        assert to_decimal(1.5) == Decimal("1.5")
        assert to_decimal("abc") == Decimal("0")

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5")) == "$1,234.50"
        assert format_currency(Decimal("47.0")) == "$47.00"
        assert format_currency(Decimal("-3")) == "-$3.00"


class TestErrors:
    def test_client_not_found_message(self):
        assert str(ClientNotFoundError("Nobody")) == "Client not found: 'Nobody'"

    def test_rate_not_found_message(self):
        err = RateNotFoundError("Acme", "Trailer")
        assert "Trailer" in str(err)
        assert "Acme" in str(err)

    def test_strict_validation_error(self):
        err = StrictValidationError(["Error 1", "Error 2"])
        assert len(err.errors) == 2
        assert "2 error(s)" in str(err)
