"""Domain models."""

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum

from .errors import ValidationError


class DocumentStatus(str, Enum):
    """Lifecycle states of a tracked document."""

    RECEIVED = "Received"
    SENT_FOR_SIGNING = "Sent for Signing"
    RETURNED_FROM_SIGNING = "Returned from Signing"
    DISPATCHED = "Dispatched"
    ARCHIVED = "Archived"


# Statuses that require dispatch details
DISPATCHED_STATUSES = frozenset({DocumentStatus.DISPATCHED, DocumentStatus.ARCHIVED})


class IntakeMethod(str, Enum):
    """How a draft entered the system."""

    SCAN = "scan"
    UPLOAD = "upload"
    MANUAL = "manual"


class ProcessingState(str, Enum):
    """Extraction progress of a batch item."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingState.COMPLETE, ProcessingState.FAILED)


@dataclass(frozen=True)
class StatusEntry:
    """One entry of a document's status history."""

    status: DocumentStatus
    timestamp: datetime
    notes: str | None = None


@dataclass(frozen=True)
class DispatchedDetails:
    """Proof of hand-over to a recipient."""

    recipient_name: str
    dispatched_by: str
    dispatched_date: datetime
    recipient_signature: str  # Encoded image (data URL)
    recipient_photo: str  # Encoded image (data URL)

    def missing_fields(self) -> list[str]:
        """Names of fields that are empty."""
        return [f.name for f in fields(self) if not getattr(self, f.name)]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


@dataclass(frozen=True)
class Document:
    """A tracked piece of correspondence."""

    id: str
    subject: str
    sender_name: str
    reference_number: str
    originating_division: str
    letter_date: date | None
    received_date: datetime
    status: DocumentStatus
    status_history: tuple[StatusEntry, ...]
    scanned_document: str | None = None
    dispatched_details: DispatchedDetails | None = None
    signing_office: str | None = None
    delivered_by: str | None = None

    @property
    def last_entry(self) -> StatusEntry:
        return self.status_history[-1]


@dataclass(frozen=True)
class FieldSet:
    """Fields extracted from a document image, empty when unknown."""

    letter_date: str = ""
    sender_name: str = ""
    subject: str = ""
    reference_number: str = ""
    originating_division: str = ""


FIELD_NAMES = tuple(f.name for f in fields(FieldSet))


def parse_letter_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string, returning None when blank or invalid."""
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class DocumentDraft:
    """A validated-on-demand request to create a Document."""

    subject: str = ""
    sender_name: str = ""
    reference_number: str = ""
    originating_division: str = ""
    letter_date: date | None = None
    scanned_document: str | None = None
    delivered_by: str | None = None
    signing_office: str | None = None
    status: DocumentStatus = DocumentStatus.RECEIVED
    dispatched_details: DispatchedDetails | None = None
    intake: IntakeMethod = IntakeMethod.MANUAL

    @classmethod
    def from_fields(cls, extracted: FieldSet, **extra) -> "DocumentDraft":
        """Build a draft from extracted fields plus any extra attributes."""
        return cls(
            subject=extracted.subject,
            sender_name=extracted.sender_name,
            reference_number=extracted.reference_number,
            originating_division=extracted.originating_division,
            letter_date=parse_letter_date(extracted.letter_date),
            **extra,
        )

    def validate(self) -> None:
        """Raise ValidationError if the draft cannot become a Document."""
        problems = []

        for name in ("subject", "sender_name", "reference_number", "originating_division"):
            if not isinstance(getattr(self, name), str):
                problems.append(f"{name} must be a string")

        if self.intake in (IntakeMethod.SCAN, IntakeMethod.UPLOAD) and not self.scanned_document:
            problems.append(f"scanned_document is required for {self.intake.value} intake")

        if self.status in DISPATCHED_STATUSES:
            if self.dispatched_details is None:
                problems.append(f"dispatched_details is required for status {self.status.value}")
            elif not self.dispatched_details.is_complete:
                missing = ", ".join(self.dispatched_details.missing_fields())
                problems.append(f"dispatched_details incomplete: {missing}")
        elif self.dispatched_details is not None:
            problems.append(f"dispatched_details not allowed for status {self.status.value}")

        if problems:
            raise ValidationError("; ".join(problems))


@dataclass(frozen=True)
class BatchItem:
    """Extraction-and-edit state of one page or file in a batch."""

    id: str
    source_file_name: str
    source_image: str
    page_number: int | None = None
    processing_state: ProcessingState = ProcessingState.PENDING
    extracted_fields: FieldSet | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.processing_state == ProcessingState.COMPLETE:
            if self.extracted_fields is None or self.error is not None:
                raise ValueError("Complete item needs fields and no error")
        elif self.processing_state == ProcessingState.FAILED:
            if self.error is None or self.extracted_fields is not None:
                raise ValueError("Failed item needs an error and no fields")

    @property
    def label(self) -> str:
        if self.page_number is not None:
            return f"{self.source_file_name} (page {self.page_number})"
        return self.source_file_name


@dataclass(frozen=True)
class CommonFields:
    """Values applied to every document of a committed batch."""

    delivered_by: str = ""
    signing_office: str | None = None


@dataclass
class BatchSummary:
    """Per-state item counts."""

    pending: int = 0
    analyzing: int = 0
    complete: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.analyzing + self.complete + self.failed

    @property
    def done(self) -> bool:
        return self.pending == 0 and self.analyzing == 0
