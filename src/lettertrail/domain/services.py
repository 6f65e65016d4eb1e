"""Domain services - orchestrate store and lifecycle."""

import logging

from . import lifecycle
from .errors import NotFound
from .models import DispatchedDetails, Document, DocumentStatus
from .store import DocumentStore

logger = logging.getLogger(__name__)


class RegistryService:
    """Applies lifecycle transitions to stored documents."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _get(self, doc_id: str) -> Document:
        doc = self.store.get_by_id(doc_id)
        if doc is None:
            raise NotFound(doc_id)
        return doc

    def dispatch(
        self,
        doc_id: str,
        recipient_name: str,
        dispatched_by: str,
        recipient_signature: str,
        recipient_photo: str,
    ) -> Document:
        """Hand a document over; status and proof are stored together."""
        doc = self._get(doc_id)
        details = DispatchedDetails(
            recipient_name=recipient_name.strip(),
            dispatched_by=dispatched_by.strip(),
            dispatched_date=self.store.clock(),
            recipient_signature=recipient_signature,
            recipient_photo=recipient_photo,
        )
        dispatched = lifecycle.dispatch(doc, details)
        self.store.update(dispatched)
        logger.info(f"Dispatched {doc_id} to {details.recipient_name}")
        return dispatched

    def advance(self, doc_id: str, status: DocumentStatus, notes: str | None = None) -> Document:
        """Move a document to any status that needs no dispatch details."""
        doc = self._get(doc_id)
        updated = lifecycle.append_transition(doc, status, self.store.clock(), notes=notes)
        self.store.update(updated)
        logger.info(f"{doc_id}: {doc.status.value} -> {status.value}")
        return updated
