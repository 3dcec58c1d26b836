"""Payment processor fees and net earnings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from episode_billing.models import quantize


@dataclass(frozen=True)
class FeeSchedule:
    percentage: Decimal
    flat: Decimal


FEE_SCHEDULES: dict[str, FeeSchedule] = {
    "venmo": FeeSchedule(percentage=Decimal("0.019"), flat=Decimal("0.10")),
    "paypal": FeeSchedule(percentage=Decimal("0.029"), flat=Decimal("0.10")),
}

NO_FEE = FeeSchedule(percentage=Decimal("0"), flat=Decimal("0"))


def fee_schedule(payment_method: str) -> FeeSchedule:
    return FEE_SCHEDULES.get((payment_method or "").strip().lower(), NO_FEE)


def processing_fee(amount: Decimal, payment_method: str) -> Decimal:
    if not amount:
        return Decimal("0.00")
    schedule = fee_schedule(payment_method)
    return quantize(amount * schedule.percentage + schedule.flat)


def earned_after_fees(amount: Decimal, payment_method: str) -> Decimal:
    if not amount:
        return Decimal("0.00")
    schedule = fee_schedule(payment_method)
    # Round once, on the net amount.
    return quantize(amount - (amount * schedule.percentage + schedule.flat))
