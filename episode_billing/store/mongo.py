"""MongoDB document store for clients and invoices.

Invoices reference clients by name (or alias). ``clientId`` is stamped on
writes as a convenience back-link; the name stays authoritative.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from episode_billing.config import Settings
from episode_billing.engine.rates import find_client
from episode_billing.models import (
    Client,
    ClientNotFoundError,
    Invoice,
    InvoiceNotFoundError,
)

logger = logging.getLogger(__name__)


def _object_id(invoice_id: str) -> ObjectId:
    try:
        return ObjectId(invoice_id)
    except (InvalidId, TypeError):
        raise InvoiceNotFoundError(invoice_id)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BillingStore:
    """Thin repository over the ``clients`` and ``invoices`` collections."""

    def __init__(self, db: Database):
        self.db = db
        self.clients = db["clients"]
        self.invoices = db["invoices"]

    @classmethod
    def from_settings(cls, settings: Settings) -> "BillingStore":
        client: MongoClient = MongoClient(settings.MONGODB_URI, tz_aware=True)
        logger.info("Connecting to MongoDB database %r", settings.MONGODB_DB)
        return cls(client[settings.MONGODB_DB])

    # --- Clients ---

    def find_client(self, name: str) -> Optional[Client]:
        docs = self.clients.find({"$or": [{"name": name}, {"aliases": name}]})
        return find_client((Client.from_document(d) for d in docs), name)

    def get_client(self, name: str) -> Client:
        client = self.find_client(name)
        if client is None:
            raise ClientNotFoundError(name)
        return client

    def list_clients(self) -> list[Client]:
        return [Client.from_document(d) for d in self.clients.find().sort("name")]

    def upsert_client(self, client: Client) -> Client:
        doc = client.to_document()
        now = _now()
        self.clients.update_one(
            {"name": client.name},
            {"$set": {**doc, "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
            upsert=True,
        )
        logger.info("Upserted client %r (%d rate(s))", client.name, len(client.rates))
        return self.get_client(client.name)

    # --- Invoices ---

    def list_invoices(self) -> list[Invoice]:
        cursor = self.invoices.find().sort("dateInvoiced", DESCENDING)
        return [Invoice.from_document(d) for d in cursor]

    def get_invoice(self, invoice_id: str) -> Invoice:
        doc = self.invoices.find_one({"_id": _object_id(invoice_id)})
        if doc is None:
            raise InvoiceNotFoundError(invoice_id)
        return Invoice.from_document(doc)

    def create_invoice(self, invoice: Invoice) -> Invoice:
        client = self.get_client(invoice.client)
        invoice.client_id = ObjectId(client.id) if client.id else None
        invoice.created_at = invoice.updated_at = _now()
        result = self.invoices.insert_one(invoice.to_document())
        invoice.id = str(result.inserted_id)
        logger.info("Created invoice %s for %r: %r", invoice.id, invoice.client, invoice.episode_title)
        return invoice

    def update_invoice(self, invoice: Invoice) -> Invoice:
        if invoice.id is None:
            raise InvoiceNotFoundError("<unsaved>")
        client = self.get_client(invoice.client)
        invoice.client_id = ObjectId(client.id) if client.id else None
        invoice.updated_at = _now()
        doc = invoice.to_document()
        doc.pop("createdAt", None)
        result = self.invoices.update_one({"_id": _object_id(invoice.id)}, {"$set": doc})
        if result.matched_count == 0:
            raise InvoiceNotFoundError(invoice.id)
        logger.info("Updated invoice %s", invoice.id)
        return invoice

    def delete_invoice(self, invoice_id: str) -> None:
        result = self.invoices.delete_one({"_id": _object_id(invoice_id)})
        if result.deleted_count == 0:
            raise InvoiceNotFoundError(invoice_id)
        logger.info("Deleted invoice %s", invoice_id)

    def replace_invoices(self, invoices: list[Invoice]) -> int:
        """Drop every invoice and insert the given ones (spreadsheet migration)."""
        deleted = self.invoices.delete_many({}).deleted_count
        logger.info("Deleted %d existing invoice(s)", deleted)
        return self.insert_invoices(invoices)

    def insert_invoices(self, invoices: list[Invoice]) -> int:
        if not invoices:
            return 0
        now = _now()
        docs = []
        for invoice in invoices:
            invoice.created_at = invoice.created_at or now
            invoice.updated_at = now
            docs.append(invoice.to_document())
        result = self.invoices.insert_many(docs)
        for invoice, inserted_id in zip(invoices, result.inserted_ids):
            invoice.id = str(inserted_id)
        logger.info("Inserted %d invoice(s)", len(result.inserted_ids))
        return len(result.inserted_ids)

    def link_invoices_to_clients(self) -> tuple[int, int]:
        """Back-fill ``clientId`` on every invoice; returns (updated, skipped)."""
        clients = self.list_clients()
        updated = skipped = 0
        for doc in self.invoices.find({}, {"client": 1}):
            client = find_client(clients, doc.get("client") or "")
            if client is None or client.id is None:
                logger.warning("No matching client found for invoice with client name: %r", doc.get("client"))
                skipped += 1
                continue
            self.invoices.update_one(
                {"_id": doc["_id"]},
                {"$set": {"clientId": ObjectId(client.id), "updatedAt": _now()}},
            )
            updated += 1
        return updated, skipped
