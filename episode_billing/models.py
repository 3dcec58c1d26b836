"""Canonical data model for episode billing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional

from episode_billing.dates import parse_date, to_datetime

CENTS = Decimal("0.01")


def quantize(value: Decimal) -> Decimal:
    """Round a money or decimal quantity to 2 places, half up."""
    return value.quantize(CENTS, ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored number (int, float, str, Decimal) to Decimal; blanks are 0."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def format_currency(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


class RateType(Enum):
    PER_MINUTE = "Per delivered minute"
    HOURLY = "Hourly"
    FLAT_RATE = "Flat rate"

    @classmethod
    def parse(cls, label: str) -> "RateType":
        """Accept stored labels as well as the legacy form labels."""
        legacy = {
            "per-minute": cls.PER_MINUTE,
            "per-hour": cls.HOURLY,
            "per-episode": cls.FLAT_RATE,
        }
        key = label.strip()
        if key.lower() in legacy:
            return legacy[key.lower()]
        for member in cls:
            if member.value.lower() == key.lower():
                return member
        raise ValueError(f"Unknown rate type: '{label}'")

    @property
    def quantity_label(self) -> str:
        if self is RateType.PER_MINUTE:
            return "Minutes"
        if self is RateType.HOURLY:
            return "Hours"
        return "Qty"


@dataclass(frozen=True)
class TimeEntry:
    """One logged span of time. Minutes/seconds are not range-checked."""
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def __post_init__(self) -> None:
        for name, val in [("hours", self.hours), ("minutes", self.minutes), ("seconds", self.seconds)]:
            if val < 0:
                raise ValueError(f"Time entry '{name}' must not be negative, got {val}")

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def to_document(self) -> dict:
        return {"hours": self.hours, "minutes": self.minutes, "seconds": self.seconds}

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> "TimeEntry":
        doc = doc or {}
        return cls(
            hours=int(doc.get("hours") or 0),
            minutes=int(doc.get("minutes") or 0),
            seconds=int(doc.get("seconds") or 0),
        )


def _entries_from_document(value: Any) -> list[TimeEntry]:
    # Older documents hold a single object instead of a list.
    if value is None:
        return []
    if isinstance(value, dict):
        return [TimeEntry.from_document(value)]
    return [TimeEntry.from_document(v) for v in value]


@dataclass(frozen=True)
class Rate:
    """Billing rate a client pays for one episode type."""
    episode_type: str
    rate_type: RateType
    rate: Decimal

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ValueError(f"Rate for '{self.episode_type}' must not be negative, got {self.rate}")

    def to_document(self) -> dict:
        return {
            "episodeType": self.episode_type,
            "rateType": self.rate_type.value,
            "rate": float(self.rate),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Rate":
        return cls(
            episode_type=str(doc["episodeType"]),
            rate_type=RateType.parse(str(doc["rateType"])),
            rate=to_decimal(doc["rate"]),
        )


@dataclass
class Client:
    name: str
    aliases: list[str] = field(default_factory=list)
    rates: list[Rate] = field(default_factory=list)
    email: Optional[str] = None
    id: Optional[str] = None

    def to_document(self) -> dict:
        doc: dict[str, Any] = {
            "name": self.name,
            "aliases": list(self.aliases),
            "rates": [r.to_document() for r in self.rates],
        }
        if self.email:
            doc["email"] = self.email
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Client":
        return cls(
            name=str(doc["name"]),
            aliases=[str(a) for a in doc.get("aliases") or []],
            rates=[Rate.from_document(r) for r in doc.get("rates") or []],
            email=doc.get("email") or None,
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
        )


@dataclass
class Invoice:
    """One billable episode."""
    client: str
    episode_title: str
    type: str
    length: list[TimeEntry] = field(default_factory=list)
    editing_time: list[TimeEntry] = field(default_factory=list)
    billed_quantity: Decimal = Decimal("0")
    invoiced_amount: Decimal = Decimal("0")
    payment_method: str = ""
    earned_after_fees: Decimal = Decimal("0")
    date_invoiced: Optional[date] = None
    date_paid: Optional[date] = None
    note: str = ""
    id: Optional[str] = None
    client_id: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.date_paid is not None

    def to_document(self) -> dict:
        doc: dict[str, Any] = {
            "client": self.client,
            "episodeTitle": self.episode_title,
            "type": self.type,
            "length": [e.to_document() for e in self.length],
            "editingTime": [e.to_document() for e in self.editing_time],
            "billedQuantity": float(self.billed_quantity),
            "invoicedAmount": float(self.invoiced_amount),
            "paymentMethod": self.payment_method,
            "earnedAfterFees": float(self.earned_after_fees),
            "dateInvoiced": to_datetime(self.date_invoiced),
            "datePaid": to_datetime(self.date_paid),
            "note": self.note,
        }
        if self.client_id is not None:
            doc["clientId"] = self.client_id
        if self.created_at is not None:
            doc["createdAt"] = self.created_at
        if self.updated_at is not None:
            doc["updatedAt"] = self.updated_at
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Invoice":
        billed = doc.get("billedQuantity", doc.get("billedMinutes"))
        return cls(
            client=str(doc.get("client") or ""),
            episode_title=str(doc.get("episodeTitle") or ""),
            type=str(doc.get("type") or ""),
            length=_entries_from_document(doc.get("length")),
            editing_time=_entries_from_document(doc.get("editingTime")),
            billed_quantity=to_decimal(billed),
            invoiced_amount=to_decimal(doc.get("invoicedAmount")),
            payment_method=str(doc.get("paymentMethod") or ""),
            earned_after_fees=to_decimal(doc.get("earnedAfterFees")),
            date_invoiced=parse_date(doc.get("dateInvoiced")),
            date_paid=parse_date(doc.get("datePaid")),
            note=str(doc.get("note") or ""),
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            client_id=doc.get("clientId"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )


class BillingError(Exception):
    """Base class for billing domain errors."""


class ClientNotFoundError(BillingError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Client not found: '{name}'")


class RateNotFoundError(BillingError):
    def __init__(self, client: str, episode_type: str):
        self.client = client
        self.episode_type = episode_type
        super().__init__(f"No rate found for episode type '{episode_type}' (client '{client}')")


class InvoiceNotFoundError(BillingError):
    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: '{invoice_id}'")


class PaymentError(BillingError):
    """Raised when a checkout session cannot be created."""


class StrictValidationError(Exception):
    """Raised when strict validation fails."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Strict validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))
