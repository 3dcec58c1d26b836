"""Earnings report.

Summarises invoiced amounts, processing fees, net earnings and outstanding
balances across episodes, overall and per client.
"""

from __future__ import annotations

import json
from collections import defaultdict
from decimal import Decimal
from pathlib import Path

from episode_billing.engine.time_calc import decimal_hours
from episode_billing.models import Invoice


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


def _totals(invoices: list[Invoice]) -> dict:
    invoiced = sum((i.invoiced_amount for i in invoices), Decimal("0"))
    earned = sum((i.earned_after_fees for i in invoices), Decimal("0"))
    outstanding = sum(
        (i.invoiced_amount for i in invoices if i.date_invoiced and not i.is_paid),
        Decimal("0"),
    )
    hours = sum((decimal_hours(i.editing_time) for i in invoices), Decimal("0"))
    return {
        "episodes": len(invoices),
        "invoiced": invoiced,
        "fees": invoiced - earned,
        "earned_after_fees": earned,
        "outstanding": outstanding,
        "paid_episodes": sum(1 for i in invoices if i.is_paid),
        "editing_hours": hours,
    }


def generate_report_dict(invoices: list[Invoice]) -> dict:
    """Build the report dictionary (no file I/O). Money and hours stay Decimal."""
    by_client: dict[str, list[Invoice]] = defaultdict(list)
    for invoice in invoices:
        by_client[invoice.client].append(invoice)

    dates = sorted(i.date_invoiced for i in invoices if i.date_invoiced)

    return {
        "summary": _totals(invoices),
        "clients": {name: _totals(group) for name, group in sorted(by_client.items())},
        "unpaid": [
            {
                "id": i.id,
                "client": i.client,
                "episode_title": i.episode_title,
                "invoiced": i.invoiced_amount,
                "date_invoiced": i.date_invoiced.isoformat(),
            }
            for i in sorted(
                (i for i in invoices if i.date_invoiced and not i.is_paid),
                key=lambda x: x.date_invoiced,
            )
        ],
        "date_range": {
            "start": dates[0].isoformat() if dates else None,
            "end": dates[-1].isoformat() if dates else None,
        },
    }


def generate_report(invoices: list[Invoice], output_path: str | Path) -> Path:
    """Write the earnings report as JSON."""
    output_path = Path(output_path)
    report = generate_report_dict(invoices)
    output_path.write_text(json.dumps(report, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
