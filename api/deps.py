"""Request dependencies: settings, document store, API-key auth."""

from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from episode_billing.config import Settings, get_settings
from episode_billing.store import BillingStore

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@lru_cache
def _store_for(uri: str, db_name: str) -> BillingStore:
    return BillingStore.from_settings(Settings(MONGODB_URI=uri, MONGODB_DB=db_name))


def get_store(settings: Settings = Depends(get_settings)) -> BillingStore:
    return _store_for(settings.MONGODB_URI, settings.MONGODB_DB)


def require_api_key(
    api_key: str | None = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Gate write endpoints. No configured key means local mode: allow."""
    if not settings.API_KEY:
        return
    if not api_key or not secrets.compare_digest(api_key, settings.API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
