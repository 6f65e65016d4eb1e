"""Dashboard queries over the document collection."""

from collections.abc import Iterable

from .lifecycle import is_outgoing
from .models import Document

SEARCH_FIELDS = ("subject", "sender_name", "reference_number", "originating_division", "delivered_by")


def partition(documents: Iterable[Document]) -> tuple[list[Document], list[Document]]:
    """Split into (incoming, outgoing), newest first.

    Incoming is ordered by received date, outgoing by dispatch date.
    """
    incoming = []
    outgoing = []
    for doc in documents:
        (outgoing if is_outgoing(doc.status) else incoming).append(doc)

    incoming.sort(key=lambda d: d.received_date, reverse=True)
    outgoing.sort(
        key=lambda d: d.dispatched_details.dispatched_date if d.dispatched_details else d.received_date,
        reverse=True,
    )
    return incoming, outgoing


def search(documents: Iterable[Document], term: str) -> list[Document]:
    """Case-insensitive substring match over the descriptive fields."""
    needle = term.strip().casefold()
    if not needle:
        return list(documents)
    return [
        doc
        for doc in documents
        if any(needle in (getattr(doc, name) or "").casefold() for name in SEARCH_FIELDS)
    ]
