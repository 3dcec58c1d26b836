"""Derived performance stats (display only, never persisted)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from episode_billing.engine.time_calc import decimal_hours, decimal_minutes
from episode_billing.models import Invoice, quantize


@dataclass(frozen=True)
class PerformanceStats:
    billed_minutes: Decimal
    editing_hours: Decimal
    earned_per_billed_minute: Decimal
    earned_per_hour_worked: Decimal


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if not denominator:
        return Decimal("0.00")
    return quantize(numerator / denominator)


def earned_per_billed_minute(earned: Decimal, billed_minutes: Decimal) -> Decimal:
    return _ratio(earned, billed_minutes)


def earned_per_hour_worked(earned: Decimal, editing_hours: Decimal) -> Decimal:
    return _ratio(earned, editing_hours)


def invoice_stats(invoice: Invoice) -> PerformanceStats:
    minutes = decimal_minutes(invoice.length)
    hours = decimal_hours(invoice.editing_time)
    return PerformanceStats(
        billed_minutes=minutes,
        editing_hours=hours,
        earned_per_billed_minute=earned_per_billed_minute(invoice.earned_after_fees, minutes),
        earned_per_hour_worked=earned_per_hour_worked(invoice.earned_after_fees, hours),
    )
