"""Unit tests for store serialization."""

import json
from dataclasses import replace
from datetime import date, timedelta

import pytest

from conftest import IMAGE, START
from lettertrail.adapters.storage import InMemoryStore
from lettertrail.domain import lifecycle
from lettertrail.domain.errors import StoreCorruption
from lettertrail.domain.models import DispatchedDetails, Document, DocumentStatus
from lettertrail.domain.serialization import document_to_dict, dumps, loads
from lettertrail.domain.store import DocumentStore


@pytest.fixture
def document() -> Document:
    return Document(
        id="doc_1",
        subject="Budget Report",
        sender_name="Finance Dept",
        reference_number="FIN/2024/017",
        originating_division="Treasury",
        letter_date=date(2024, 3, 1),
        received_date=START,
        status=DocumentStatus.RECEIVED,
        status_history=lifecycle.seed_history(DocumentStatus.RECEIVED, START),
        scanned_document=IMAGE,
        delivered_by="Courier A",
    )


class TestDumps:
    """Tests for the persisted form."""

    def test_camel_case_keys(self, document: Document) -> None:
        data = document_to_dict(document)
        assert data["senderName"] == "Finance Dept"
        assert data["referenceNumber"] == "FIN/2024/017"
        assert data["originatingDivision"] == "Treasury"
        assert data["receivedDate"] == START.isoformat()
        assert data["letterDate"] == "2024-03-01"
        assert data["statusHistory"] == [{"status": "Received", "timestamp": START.isoformat()}]

    def test_absent_letter_date_is_null(self, document: Document) -> None:
        data = document_to_dict(
            replace(document, letter_date=None)
        )
        assert data["letterDate"] is None

    def test_optional_provenance_omitted(self, document: Document) -> None:
        data = document_to_dict(document)
        assert "signingOffice" not in data
        assert data["deliveredBy"] == "Courier A"

    def test_array_root(self, document: Document) -> None:
        assert isinstance(json.loads(dumps([document])), list)

    def test_non_ascii_kept(self, document: Document) -> None:
        doc = replace(document, sender_name="Ministère")
        assert "Ministère" in dumps([doc])


class TestLoads:
    """Tests for parsing the persisted form."""

    def test_round_trip(self, document: Document, sample_details: DispatchedDetails) -> None:
        moved = lifecycle.append_transition(
            document, DocumentStatus.SENT_FOR_SIGNING, START + timedelta(hours=1), notes="Director"
        )
        moved = lifecycle.append_transition(
            moved, DocumentStatus.RETURNED_FROM_SIGNING, START + timedelta(hours=2)
        )
        dispatched = replace(lifecycle.dispatch(moved, sample_details), id="doc_2")

        assert loads(dumps([document, dispatched])) == [document, dispatched]

    def test_round_trip_keeps_microseconds(self, document: Document) -> None:
        (restored,) = loads(dumps([document]))
        assert restored.received_date == START
        assert restored.received_date.microsecond == 123456

    def test_null_letter_date(self, document: Document) -> None:
        data = document_to_dict(document)
        data["letterDate"] = None
        (restored,) = loads(json.dumps([data]))
        assert restored.letter_date is None

    def test_empty_array(self) -> None:
        assert loads("[]") == []

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "{}",
            "[1]",
            '[{"id": "doc_1"}]',
        ],
    )
    def test_corrupt_input(self, text: str) -> None:
        with pytest.raises(StoreCorruption):
            loads(text)

    def test_unknown_status(self, document: Document) -> None:
        data = document_to_dict(document)
        data["status"] = "Lost"
        with pytest.raises(StoreCorruption):
            loads(json.dumps([data]))

    def test_bad_timestamp(self, document: Document) -> None:
        data = document_to_dict(document)
        data["receivedDate"] = "yesterday"
        with pytest.raises(StoreCorruption):
            loads(json.dumps([data]))

    def test_empty_history(self, document: Document) -> None:
        data = document_to_dict(document)
        data["statusHistory"] = []
        with pytest.raises(StoreCorruption):
            loads(json.dumps([data]))

    def test_duplicate_ids(self, document: Document) -> None:
        with pytest.raises(StoreCorruption, match="Duplicate"):
            loads(dumps([document, document]))

    def test_naive_timestamp(self, document: Document) -> None:
        data = document_to_dict(document)
        data["receivedDate"] = "2024-03-15T09:30:00"
        with pytest.raises(StoreCorruption, match="offset"):
            loads(json.dumps([data]))

    def test_naive_history_timestamp(self, document: Document) -> None:
        data = document_to_dict(document)
        data["statusHistory"][0]["timestamp"] = "2024-03-15T09:30:00"
        with pytest.raises(StoreCorruption, match="offset"):
            loads(json.dumps([data]))


class TestLoadInvariants:
    """Records the lifecycle could not have produced are rejected."""

    @pytest.fixture
    def dispatched(self, document: Document, sample_details: DispatchedDetails) -> dict:
        return document_to_dict(lifecycle.dispatch(document, sample_details))

    def test_valid_dispatched_loads(self, dispatched: dict) -> None:
        (doc,) = loads(json.dumps([dispatched]))
        assert doc.status == DocumentStatus.DISPATCHED

    def test_dispatched_without_details(self, dispatched: dict) -> None:
        dispatched["dispatchedDetails"] = None
        with pytest.raises(StoreCorruption, match="without dispatchedDetails"):
            loads(json.dumps([dispatched]))

    def test_archived_without_details(self, dispatched: dict) -> None:
        dispatched["status"] = "Archived"
        dispatched["statusHistory"].append(
            {"status": "Archived", "timestamp": (START + timedelta(days=5)).isoformat()}
        )
        dispatched["dispatchedDetails"] = None
        with pytest.raises(StoreCorruption, match="without dispatchedDetails"):
            loads(json.dumps([dispatched]))

    def test_incomplete_details(self, dispatched: dict) -> None:
        dispatched["dispatchedDetails"]["recipientSignature"] = ""
        with pytest.raises(StoreCorruption, match="recipient_signature"):
            loads(json.dumps([dispatched]))

    def test_details_on_received(self, document: Document, dispatched: dict) -> None:
        data = document_to_dict(document)
        data["dispatchedDetails"] = dispatched["dispatchedDetails"]
        with pytest.raises(StoreCorruption, match="on a Received document"):
            loads(json.dumps([data]))

    def test_history_out_of_order(self, dispatched: dict) -> None:
        dispatched["statusHistory"].reverse()
        dispatched["status"] = "Received"
        dispatched["dispatchedDetails"] = None
        with pytest.raises(StoreCorruption, match="time order"):
            loads(json.dumps([dispatched]))

    def test_status_differs_from_history(self, document: Document) -> None:
        data = document_to_dict(document)
        data["status"] = "Sent for Signing"
        with pytest.raises(StoreCorruption, match="differs from last history entry"):
            loads(json.dumps([data]))

    def test_corrupt_record_resets_store(self, dispatched: dict) -> None:
        dispatched["dispatchedDetails"] = None
        store = DocumentStore(InMemoryStore(json.dumps([dispatched])))

        assert store.load() == []
        assert store.load_failed is True
