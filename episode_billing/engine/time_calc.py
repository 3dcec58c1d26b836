"""Time aggregation.

Editing sessions and episode segments are logged incrementally as
``TimeEntry`` values. They are summed unit by unit and then normalized by
carrying seconds into minutes and minutes into hours; hours are unbounded.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from episode_billing.models import TimeEntry, quantize


def normalize(entry: TimeEntry) -> TimeEntry:
    """Fold seconds and minutes into the 0-59 range."""
    minutes = entry.minutes + entry.seconds // 60
    seconds = entry.seconds % 60
    hours = entry.hours + minutes // 60
    minutes = minutes % 60
    return TimeEntry(hours=hours, minutes=minutes, seconds=seconds)


def sum_time_entries(entries: Iterable[TimeEntry]) -> TimeEntry:
    """Sum entries into a single normalized total."""
    hours = minutes = seconds = 0
    for entry in entries:
        hours += entry.hours
        minutes += entry.minutes
        seconds += entry.seconds
    return normalize(TimeEntry(hours=hours, minutes=minutes, seconds=seconds))


def decimal_hours(entries: Iterable[TimeEntry]) -> Decimal:
    total = sum_time_entries(entries)
    value = (
        Decimal(total.hours)
        + Decimal(total.minutes) / Decimal(60)
        + Decimal(total.seconds) / Decimal(3600)
    )
    return quantize(value)


def decimal_minutes(entries: Iterable[TimeEntry]) -> Decimal:
    total = sum_time_entries(entries)
    value = (
        Decimal(total.hours * 60)
        + Decimal(total.minutes)
        + Decimal(total.seconds) / Decimal(60)
    )
    return quantize(value)


def format_duration(entries: Iterable[TimeEntry]) -> str:
    """Human readable total plus decimal hours, e.g. '1h 45m (1.75 hours)'."""
    entries = list(entries)
    total = sum_time_entries(entries)
    parts = []
    if total.hours:
        parts.append(f"{total.hours}h")
    if total.minutes:
        parts.append(f"{total.minutes}m")
    if total.seconds:
        parts.append(f"{total.seconds}s")
    human = " ".join(parts) or "0s"
    return f"{human} ({decimal_hours(entries)} hours)"
