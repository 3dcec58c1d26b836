"""Billing and validation engines."""
from episode_billing.engine.calculator import (
    BillingResult,
    apply_billing,
    bill_invoice,
    calculate_billing,
    log_time,
)
from episode_billing.engine.fees import earned_after_fees, processing_fee
from episode_billing.engine.rates import find_client, normalize_episode_type, resolve_rate
from episode_billing.engine.stats import PerformanceStats, invoice_stats
from episode_billing.engine.time_calc import (
    decimal_hours,
    decimal_minutes,
    format_duration,
    sum_time_entries,
)
from episode_billing.engine.validator import validate_invoice, validate_invoices

__all__ = [
    "BillingResult",
    "PerformanceStats",
    "apply_billing",
    "bill_invoice",
    "calculate_billing",
    "decimal_hours",
    "decimal_minutes",
    "earned_after_fees",
    "find_client",
    "format_duration",
    "invoice_stats",
    "log_time",
    "normalize_episode_type",
    "processing_fee",
    "resolve_rate",
    "sum_time_entries",
    "validate_invoice",
    "validate_invoices",
]
