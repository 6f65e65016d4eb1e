"""JSON serialization of the document collection.

The persisted form is a single JSON array. Date-valued fields are written as
ISO-8601 text and parsed back on load; ``letterDate`` is ``null`` when absent.
Timestamps must carry a UTC offset, and every loaded record must be one the
lifecycle could have produced.
"""

import json
from datetime import date, datetime
from typing import Any

from .errors import StoreCorruption
from .models import DISPATCHED_STATUSES, DispatchedDetails, Document, DocumentStatus, StatusEntry


def _details_to_dict(details: DispatchedDetails) -> dict[str, Any]:
    return {
        "recipientName": details.recipient_name,
        "dispatchedBy": details.dispatched_by,
        "dispatchedDate": details.dispatched_date.isoformat(),
        "recipientSignature": details.recipient_signature,
        "recipientPhoto": details.recipient_photo,
    }


def document_to_dict(doc: Document) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": doc.id,
        "subject": doc.subject,
        "senderName": doc.sender_name,
        "referenceNumber": doc.reference_number,
        "originatingDivision": doc.originating_division,
        "letterDate": doc.letter_date.isoformat() if doc.letter_date else None,
        "receivedDate": doc.received_date.isoformat(),
        "status": doc.status.value,
        "statusHistory": [
            {
                "status": entry.status.value,
                "timestamp": entry.timestamp.isoformat(),
                **({"notes": entry.notes} if entry.notes is not None else {}),
            }
            for entry in doc.status_history
        ],
        "scannedDocument": doc.scanned_document,
        "dispatchedDetails": (
            _details_to_dict(doc.dispatched_details) if doc.dispatched_details else None
        ),
    }
    # Optional provenance fields are omitted rather than written as null
    if doc.signing_office is not None:
        data["signingOffice"] = doc.signing_office
    if doc.delivered_by is not None:
        data["deliveredBy"] = doc.delivered_by
    return data


def _text(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _optional_text(data: dict[str, Any], key: str) -> str | None:
    if data.get(key) is None:
        return None
    return _text(data, key)


def _timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise TypeError(f"Timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp without UTC offset: {value}")
    return parsed


def _details_from_dict(data: dict[str, Any]) -> DispatchedDetails:
    return DispatchedDetails(
        recipient_name=_text(data, "recipientName"),
        dispatched_by=_text(data, "dispatchedBy"),
        dispatched_date=_timestamp(data["dispatchedDate"]),
        recipient_signature=_text(data, "recipientSignature"),
        recipient_photo=_text(data, "recipientPhoto"),
    )


def _check_invariants(doc: Document) -> None:
    """Raise ValueError for a record the lifecycle could not have produced."""
    if doc.status != doc.last_entry.status:
        raise ValueError(
            f"{doc.id}: status {doc.status.value} differs from last history entry "
            f"{doc.last_entry.status.value}"
        )

    timestamps = [entry.timestamp for entry in doc.status_history]
    if timestamps != sorted(timestamps):
        raise ValueError(f"{doc.id}: statusHistory is not in time order")

    if doc.status in DISPATCHED_STATUSES:
        if doc.dispatched_details is None:
            raise ValueError(f"{doc.id}: {doc.status.value} without dispatchedDetails")
        if not doc.dispatched_details.is_complete:
            missing = ", ".join(doc.dispatched_details.missing_fields())
            raise ValueError(f"{doc.id}: dispatchedDetails incomplete: {missing}")
    elif doc.dispatched_details is not None:
        raise ValueError(f"{doc.id}: dispatchedDetails on a {doc.status.value} document")


def document_from_dict(data: dict[str, Any]) -> Document:
    history = tuple(
        StatusEntry(
            status=DocumentStatus(entry["status"]),
            timestamp=_timestamp(entry["timestamp"]),
            notes=_optional_text(entry, "notes"),
        )
        for entry in data["statusHistory"]
    )
    if not history:
        raise ValueError("statusHistory is empty")

    letter_date = data.get("letterDate")
    details = data.get("dispatchedDetails")

    doc = Document(
        id=_text(data, "id"),
        subject=_text(data, "subject"),
        sender_name=_text(data, "senderName"),
        reference_number=_text(data, "referenceNumber"),
        originating_division=_text(data, "originatingDivision"),
        letter_date=date.fromisoformat(letter_date) if letter_date else None,
        received_date=_timestamp(data["receivedDate"]),
        status=DocumentStatus(data["status"]),
        status_history=history,
        scanned_document=_optional_text(data, "scannedDocument"),
        dispatched_details=_details_from_dict(details) if details else None,
        signing_office=_optional_text(data, "signingOffice"),
        delivered_by=_optional_text(data, "deliveredBy"),
    )
    _check_invariants(doc)
    return doc


def dumps(documents: list[Document]) -> str:
    """Serialize the collection to JSON text."""
    return json.dumps([document_to_dict(d) for d in documents], ensure_ascii=False)


def loads(text: str) -> list[Document]:
    """Parse JSON text into documents.

    Raises StoreCorruption if anything cannot be parsed; never returns a
    partial collection.
    """
    try:
        raw = json.loads(text)
        if not isinstance(raw, list):
            raise TypeError(f"Expected a JSON array, got {type(raw).__name__}")
        documents = [document_from_dict(item) for item in raw]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreCorruption(f"Cannot parse document store: {e}") from e

    seen: set[str] = set()
    for doc in documents:
        if doc.id in seen:
            raise StoreCorruption(f"Duplicate document id: {doc.id}")
        seen.add(doc.id)

    return documents
