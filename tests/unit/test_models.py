"""Unit tests for domain models."""

from dataclasses import replace
from datetime import date

import pytest

from conftest import IMAGE
from lettertrail.domain.errors import ValidationError
from lettertrail.domain.models import (
    BatchItem,
    DispatchedDetails,
    DocumentDraft,
    DocumentStatus,
    FieldSet,
    IntakeMethod,
    ProcessingState,
    parse_letter_date,
)


class TestDispatchedDetails:
    """Tests for DispatchedDetails."""

    def test_complete(self, sample_details: DispatchedDetails) -> None:
        assert sample_details.is_complete is True
        assert sample_details.missing_fields() == []

    def test_reports_missing_fields(self, sample_details: DispatchedDetails) -> None:
        details = replace(sample_details, recipient_signature="", recipient_photo="")
        assert details.is_complete is False
        assert details.missing_fields() == ["recipient_signature", "recipient_photo"]


class TestDocumentDraft:
    """Tests for DocumentDraft validation."""

    def test_manual_draft_needs_no_scan(self) -> None:
        DocumentDraft(subject="Memo").validate()

    def test_empty_fields_allowed(self) -> None:
        DocumentDraft().validate()

    def test_scan_intake_requires_image(self) -> None:
        with pytest.raises(ValidationError, match="scanned_document"):
            DocumentDraft(intake=IntakeMethod.SCAN).validate()

    def test_upload_intake_requires_image(self) -> None:
        with pytest.raises(ValidationError, match="upload"):
            DocumentDraft(intake=IntakeMethod.UPLOAD).validate()

    def test_dispatched_requires_details(self) -> None:
        with pytest.raises(ValidationError, match="dispatched_details is required"):
            DocumentDraft(status=DocumentStatus.DISPATCHED).validate()

    def test_dispatched_requires_complete_details(self, sample_details: DispatchedDetails) -> None:
        draft = DocumentDraft(
            status=DocumentStatus.DISPATCHED,
            dispatched_details=replace(sample_details, recipient_photo=""),
        )
        with pytest.raises(ValidationError, match="recipient_photo"):
            draft.validate()

    def test_details_rejected_for_received(self, sample_details: DispatchedDetails) -> None:
        draft = DocumentDraft(dispatched_details=sample_details)
        with pytest.raises(ValidationError, match="not allowed"):
            draft.validate()

    def test_none_subject_rejected(self) -> None:
        with pytest.raises(ValidationError, match="subject must be a string"):
            DocumentDraft(subject=None).validate()  # type: ignore[arg-type]

    def test_from_fields_parses_letter_date(self) -> None:
        fields = FieldSet(letter_date="2024-02-29", subject="Leap", sender_name="Calendar Office")
        draft = DocumentDraft.from_fields(fields, scanned_document=IMAGE)
        assert draft.letter_date == date(2024, 2, 29)
        assert draft.subject == "Leap"
        assert draft.sender_name == "Calendar Office"
        assert draft.scanned_document == IMAGE

    def test_from_fields_blank_date_is_absent(self) -> None:
        assert DocumentDraft.from_fields(FieldSet()).letter_date is None


class TestParseLetterDate:
    """Tests for parse_letter_date."""

    def test_valid(self) -> None:
        assert parse_letter_date("2024-03-15") == date(2024, 3, 15)

    def test_surrounding_whitespace(self) -> None:
        assert parse_letter_date(" 2024-03-15 ") == date(2024, 3, 15)

    def test_blank(self) -> None:
        assert parse_letter_date("") is None
        assert parse_letter_date("   ") is None
        assert parse_letter_date(None) is None

    def test_invalid(self) -> None:
        assert parse_letter_date("15/03/2024") is None
        assert parse_letter_date("2024-02-30") is None


class TestBatchItem:
    """Tests for BatchItem invariants."""

    def test_defaults_to_pending(self) -> None:
        item = BatchItem(id="a", source_file_name="scan.jpg", source_image=IMAGE)
        assert item.processing_state == ProcessingState.PENDING
        assert item.extracted_fields is None
        assert item.error is None

    def test_complete_requires_fields(self) -> None:
        with pytest.raises(ValueError):
            BatchItem(
                id="a",
                source_file_name="scan.jpg",
                source_image=IMAGE,
                processing_state=ProcessingState.COMPLETE,
            )

    def test_failed_requires_error(self) -> None:
        with pytest.raises(ValueError):
            BatchItem(
                id="a",
                source_file_name="scan.jpg",
                source_image=IMAGE,
                processing_state=ProcessingState.FAILED,
            )

    def test_failed_cannot_carry_fields(self) -> None:
        with pytest.raises(ValueError):
            BatchItem(
                id="a",
                source_file_name="scan.jpg",
                source_image=IMAGE,
                processing_state=ProcessingState.FAILED,
                extracted_fields=FieldSet(),
                error="boom",
            )

    def test_label_includes_page(self) -> None:
        item = BatchItem(id="a", source_file_name="mail.pdf", source_image=IMAGE, page_number=2)
        assert item.label == "mail.pdf (page 2)"

    def test_label_without_page(self) -> None:
        item = BatchItem(id="a", source_file_name="scan.jpg", source_image=IMAGE)
        assert item.label == "scan.jpg"


class TestProcessingState:
    """Tests for ProcessingState."""

    def test_terminal_states(self) -> None:
        assert ProcessingState.COMPLETE.is_terminal
        assert ProcessingState.FAILED.is_terminal
        assert not ProcessingState.PENDING.is_terminal
        assert not ProcessingState.ANALYZING.is_terminal
