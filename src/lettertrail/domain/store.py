"""Document store - sole owner of the persisted document collection."""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from ..ports.storage import BackingStorePort
from . import serialization
from .errors import NotFound, StoreCorruption, ValidationError
from .lifecycle import INITIAL_STATUS, seed_history
from .models import DISPATCHED_STATUSES, Document, DocumentDraft, DocumentStatus

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_document_id() -> str:
    return f"doc_{uuid.uuid4().hex}"


class DocumentStore:
    """Owns the document collection and its persistence.

    Only the store assigns ids and received dates. Every mutation rewrites
    the whole collection through the backing store before returning.
    """

    def __init__(
        self,
        backing: BackingStorePort,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_document_id,
    ) -> None:
        self.backing = backing
        self.clock = clock
        self.id_factory = id_factory
        self._documents: list[Document] = []
        self.load_failed = False

    @property
    def documents(self) -> list[Document]:
        return list(self._documents)

    def load(self) -> list[Document]:
        """Restore the collection from the backing store.

        A corrupt store is reset to the empty collection; ``load_failed`` is
        set so the caller can warn the user.
        """
        self.load_failed = False

        try:
            text = self.backing.read()
            self._documents = serialization.loads(text) if text else []
        except StoreCorruption as e:
            logger.warning(f"Document store unreadable, starting empty: {e}")
            self._documents = []
            self.load_failed = True

        logger.debug(f"Loaded {len(self._documents)} documents")
        return self.documents

    def get_by_id(self, doc_id: str) -> Document | None:
        for doc in self._documents:
            if doc.id == doc_id:
                return doc
        return None

    def create(self, draft: DocumentDraft) -> Document:
        """Create a Received document from ``draft`` and persist it."""
        draft.validate()
        now = self.clock()
        doc = self._build(draft, now, INITIAL_STATUS, now, self._taken_ids())
        self._save([*self._documents, doc])
        logger.info(f"Created document {doc.id}")
        return doc

    def create_batch(self, drafts: Iterable[DocumentDraft]) -> list[Document]:
        """Create one document per draft in a single write.

        A draft may carry a dispatch already recorded at entry time; its
        history then starts at the recorded dispatch time.
        """
        drafts = list(drafts)
        if not drafts:
            raise ValidationError("No documents to create")
        for draft in drafts:
            draft.validate()

        now = self.clock()
        taken = self._taken_ids()
        created = []
        for draft in drafts:
            seeded_at = now
            if draft.status in DISPATCHED_STATUSES and draft.dispatched_details:
                seeded_at = draft.dispatched_details.dispatched_date
            created.append(self._build(draft, now, draft.status, seeded_at, taken))

        self._save([*self._documents, *created])
        logger.info(f"Created {len(created)} documents")
        return created

    def update(self, document: Document) -> None:
        """Replace the stored document with the same id."""
        for index, existing in enumerate(self._documents):
            if existing.id == document.id:
                updated = list(self._documents)
                updated[index] = document
                self._save(updated)
                logger.debug(f"Updated document {document.id}")
                return
        raise NotFound(document.id)

    def _taken_ids(self) -> set[str]:
        return {doc.id for doc in self._documents}

    def _build(
        self,
        draft: DocumentDraft,
        received: datetime,
        status: DocumentStatus,
        seeded_at: datetime,
        taken: set[str],
    ) -> Document:
        doc_id = self.id_factory()
        while doc_id in taken:
            doc_id = self.id_factory()
        taken.add(doc_id)

        return Document(
            id=doc_id,
            subject=draft.subject,
            sender_name=draft.sender_name,
            reference_number=draft.reference_number,
            originating_division=draft.originating_division,
            letter_date=draft.letter_date,
            received_date=received,
            status=status,
            status_history=seed_history(status, seeded_at),
            scanned_document=draft.scanned_document,
            dispatched_details=draft.dispatched_details if status in DISPATCHED_STATUSES else None,
            signing_office=draft.signing_office,
            delivered_by=draft.delivered_by,
        )

    def _save(self, documents: list[Document]) -> None:
        self.backing.write(serialization.dumps(documents))
        self._documents = documents
