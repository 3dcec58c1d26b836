"""Shared fixtures."""

import mongomock
import pytest

from episode_billing.store import BillingStore


@pytest.fixture
def store():
    return BillingStore(mongomock.MongoClient()["episode_billing_test"])
