"""Pydantic request/response models for the Episode Billing API.

Field names follow the stored document shape (camelCase on the wire).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from episode_billing.engine.stats import PerformanceStats
from episode_billing.models import Client, Invoice, TimeEntry


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeEntryModel(CamelModel):
    hours: int = Field(0, ge=0)
    minutes: int = Field(0, ge=0)
    seconds: int = Field(0, ge=0)

    def to_entry(self) -> TimeEntry:
        return TimeEntry(hours=self.hours, minutes=self.minutes, seconds=self.seconds)

    @classmethod
    def from_entry(cls, entry: TimeEntry) -> "TimeEntryModel":
        return cls(hours=entry.hours, minutes=entry.minutes, seconds=entry.seconds)


class InvoiceCreate(CamelModel):
    client: str
    episode_title: str
    type: str = "Podcast"
    length: list[TimeEntryModel] = []
    editing_time: list[TimeEntryModel] = []
    payment_method: str = ""
    date_invoiced: str | None = None
    date_paid: str | None = None
    note: str = ""


class InvoiceUpdate(CamelModel):
    """Partial update. Derived amounts are not accepted; they are recomputed."""
    client: str | None = None
    episode_title: str | None = None
    type: str | None = None
    length: list[TimeEntryModel] | None = None
    editing_time: list[TimeEntryModel] | None = None
    payment_method: str | None = None
    # "" clears the date
    date_invoiced: str | None = None
    date_paid: str | None = None
    note: str | None = None


class TimeLogRequest(CamelModel):
    length: list[TimeEntryModel] = []
    editing_time: list[TimeEntryModel] = []
    payment_method: str | None = None
    date_invoiced: str | None = None
    note: str | None = None


class InvoiceOut(CamelModel):
    id: str | None = None
    client: str
    episode_title: str
    type: str
    length: list[TimeEntryModel]
    editing_time: list[TimeEntryModel]
    billed_quantity: float
    invoiced_amount: float
    payment_method: str
    earned_after_fees: float
    date_invoiced: str | None = None
    date_paid: str | None = None
    note: str

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceOut":
        return cls(
            id=invoice.id,
            client=invoice.client,
            episode_title=invoice.episode_title,
            type=invoice.type,
            length=[TimeEntryModel.from_entry(e) for e in invoice.length],
            editing_time=[TimeEntryModel.from_entry(e) for e in invoice.editing_time],
            billed_quantity=float(invoice.billed_quantity),
            invoiced_amount=float(invoice.invoiced_amount),
            payment_method=invoice.payment_method,
            earned_after_fees=float(invoice.earned_after_fees),
            date_invoiced=invoice.date_invoiced.isoformat() if invoice.date_invoiced else None,
            date_paid=invoice.date_paid.isoformat() if invoice.date_paid else None,
            note=invoice.note,
        )


class InvoiceList(CamelModel):
    invoices: list[InvoiceOut]


class RateOut(CamelModel):
    episode_type: str
    rate_type: str
    rate: float


class ClientOut(CamelModel):
    id: str | None = None
    name: str
    aliases: list[str]
    email: str | None = None
    rates: list[RateOut]

    @classmethod
    def from_client(cls, client: Client) -> "ClientOut":
        return cls(
            id=client.id,
            name=client.name,
            aliases=client.aliases,
            email=client.email,
            rates=[
                RateOut(episode_type=r.episode_type, rate_type=r.rate_type.value, rate=float(r.rate))
                for r in client.rates
            ],
        )


class StatsOut(CamelModel):
    billed_minutes: float
    editing_hours: float
    earned_after_fees: float
    earned_per_billed_minute: float
    earned_per_hour_worked: float

    @classmethod
    def from_stats(cls, invoice: Invoice, stats: PerformanceStats) -> "StatsOut":
        return cls(
            billed_minutes=float(stats.billed_minutes),
            editing_hours=float(stats.editing_hours),
            earned_after_fees=float(invoice.earned_after_fees),
            earned_per_billed_minute=float(stats.earned_per_billed_minute),
            earned_per_hour_worked=float(stats.earned_per_hour_worked),
        )


class CheckoutResponse(CamelModel):
    session_id: str
    url: str


class SavedResponse(CamelModel):
    success: bool = True
    id: str | None = None
