"""Feeds disponíveis na API Twikey.

Os esquemas das entradas ficam fora do escopo do cliente: as entradas são
entregues como dicts, exatamente como o servidor envia.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from twikey.connectors.feed import FeedEndpoint

DOCUMENT_FEED = FeedEndpoint(name="document", path="/creditor/mandate", entries_key="Messages")
TRANSACTION_FEED = FeedEndpoint(
    name="transaction", path="/creditor/transaction", entries_key="Entries"
)
INVOICE_FEED = FeedEndpoint(name="invoice", path="/creditor/invoice", entries_key="Invoices")
PAYLINK_FEED = FeedEndpoint(
    name="paylink", path="/creditor/payment/link/feed", entries_key="Links"
)
REFUND_FEED = FeedEndpoint(name="refund", path="/creditor/transfer", entries_key="Entries")

ALL_FEEDS = (DOCUMENT_FEED, TRANSACTION_FEED, INVOICE_FEED, PAYLINK_FEED, REFUND_FEED)


class DocumentEventKind(Enum):
    """Tipo de evento no feed de documentos (mandatos)."""

    NEW = "new"
    UPDATED = "updated"
    CANCELLED = "cancelled"


def classify_document_event(entry: dict[str, Any]) -> DocumentEventKind:
    """Cancelamento (CxlRsn) tem precedência sobre alteração (AmdmntRsn)."""
    if entry.get("CxlRsn") is not None:
        return DocumentEventKind.CANCELLED
    if entry.get("AmdmntRsn") is not None:
        return DocumentEventKind.UPDATED
    return DocumentEventKind.NEW
