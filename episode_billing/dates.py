"""Lenient date handling.

Historical records carry dates in several shapes (ISO timestamps, US-style
``M/D/YYYY`` strings written by the old spreadsheet, BSON datetimes).
Unparsable values become ``None`` so invoice rendering never fails on them.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

_FORMATS = [
    "%Y-%m-%d",      # 2026-01-10
    "%m/%d/%Y",      # 1/10/2026
    "%m/%d/%y",      # 1/10/26
    "%d-%b-%Y",      # 10-Jan-2026
    "%B %d, %Y",     # January 10, 2026
]


def parse_date(value: Any) -> Optional[date]:
    """Parse a stored date value; returns None for blanks and garbage."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def to_datetime(value: Optional[date]) -> Optional[datetime]:
    """BSON has no date type; store dates as midnight datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def format_long_date(value: Any) -> str:
    """'October 19, 2026', or '' when the value cannot be parsed."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return f"{parsed:%B} {parsed.day}, {parsed.year}"
