"""Rate resolution and client lookup.

Invoices reference their client by name. Clients get renamed over time, so
a client also answers to any of its aliases.
"""

from __future__ import annotations

from typing import Iterable, Optional

from episode_billing.models import Client, Rate, RateNotFoundError

# UI label -> stored rate label
EPISODE_TYPE_LABELS = {
    "Video": "Podcast video",
}


def normalize_episode_type(label: str) -> str:
    label = (label or "").strip()
    return EPISODE_TYPE_LABELS.get(label, label)


def resolve_rate(client: Client, episode_type: str) -> Rate:
    """Return the first rate matching the episode type, or raise."""
    wanted = normalize_episode_type(episode_type)
    for rate in client.rates:
        if rate.episode_type == wanted:
            return rate
    raise RateNotFoundError(client.name, wanted)


def find_client(clients: Iterable[Client], name: str) -> Optional[Client]:
    """Exact name match wins over an alias match."""
    clients = list(clients)
    for client in clients:
        if client.name == name:
            return client
    for client in clients:
        if name in client.aliases:
            return client
    return None
