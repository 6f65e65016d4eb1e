"""Document lifecycle rules.

Pure functions; every transition returns a new Document and leaves the input
untouched.

    Received -> Sent for Signing -> Returned from Signing -> Dispatched -> Archived
    Received -> Dispatched
"""

import logging
from dataclasses import replace
from datetime import datetime

from .errors import InvalidTransition
from .models import (
    DISPATCHED_STATUSES,
    DispatchedDetails,
    Document,
    DocumentStatus,
    StatusEntry,
)

logger = logging.getLogger(__name__)

INITIAL_STATUS = DocumentStatus.RECEIVED

TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.RECEIVED: frozenset(
        {DocumentStatus.SENT_FOR_SIGNING, DocumentStatus.DISPATCHED}
    ),
    DocumentStatus.SENT_FOR_SIGNING: frozenset({DocumentStatus.RETURNED_FROM_SIGNING}),
    DocumentStatus.RETURNED_FROM_SIGNING: frozenset({DocumentStatus.DISPATCHED}),
    DocumentStatus.DISPATCHED: frozenset({DocumentStatus.ARCHIVED}),
    DocumentStatus.ARCHIVED: frozenset(),
}


def allowed_transitions(status: DocumentStatus) -> frozenset[DocumentStatus]:
    return TRANSITIONS[status]


def is_outgoing(status: DocumentStatus) -> bool:
    """Dispatched and Archived documents are listed together as outgoing."""
    return status in DISPATCHED_STATUSES


def can_dispatch(document: Document) -> bool:
    return DocumentStatus.DISPATCHED in TRANSITIONS[document.status]


def append_transition(
    document: Document,
    new_status: DocumentStatus,
    timestamp: datetime,
    dispatched_details: DispatchedDetails | None = None,
    notes: str | None = None,
) -> Document:
    """Return a copy of ``document`` moved to ``new_status``.

    Moving to Dispatched requires complete ``dispatched_details``; they are
    attached in the same step. Details, once attached, are kept on every
    later transition.
    """
    last = document.last_entry
    if timestamp < last.timestamp:
        raise InvalidTransition(
            f"Timestamp {timestamp.isoformat()} is earlier than last entry "
            f"{last.timestamp.isoformat()}"
        )

    if new_status not in TRANSITIONS[document.status]:
        raise InvalidTransition(
            f"Cannot move from {document.status.value} to {new_status.value}"
        )

    details = document.dispatched_details
    if new_status == DocumentStatus.DISPATCHED:
        if dispatched_details is None:
            raise InvalidTransition("Dispatch requires dispatched details")
        if not dispatched_details.is_complete:
            missing = ", ".join(dispatched_details.missing_fields())
            raise InvalidTransition(f"Dispatched details incomplete: {missing}")
        details = dispatched_details
    elif dispatched_details is not None:
        raise InvalidTransition(
            f"Dispatched details cannot be attached to {new_status.value}"
        )

    logger.debug(f"{document.id}: {document.status.value} -> {new_status.value}")

    return replace(
        document,
        status=new_status,
        status_history=(*document.status_history, StatusEntry(new_status, timestamp, notes)),
        dispatched_details=details,
    )


def dispatch(document: Document, details: DispatchedDetails) -> Document:
    """Dispatch ``document``, stamped with the hand-over time."""
    return append_transition(
        document, DocumentStatus.DISPATCHED, details.dispatched_date, dispatched_details=details
    )


def seed_history(status: DocumentStatus, timestamp: datetime) -> tuple[StatusEntry, ...]:
    """History of a freshly created document."""
    return (StatusEntry(status, timestamp),)
