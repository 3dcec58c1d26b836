"""Document store."""
from episode_billing.store.mongo import BillingStore

__all__ = ["BillingStore"]
