"""Multi-step entry workflows as explicit state machines.

Each workflow is an immutable state plus a pure ``advance(state, event)``
function. A view layer renders the state and feeds user actions back in as
events; nothing here knows about rendering.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from .errors import ValidationError, WorkflowError
from .models import DispatchedDetails, DocumentDraft, DocumentStatus, IntakeMethod

# --- Incoming batch (manual entry and single scans) ---


class IncomingStage(str, Enum):
    LIST = "list"
    MANUAL_FORM = "manual-form"
    SCAN_FORM = "scan-form"
    REVIEW = "review"
    CANCELLED = "cancelled"
    SAVED = "saved"


INCOMING_REQUIRED = ("subject", "reference_number", "sender_name", "originating_division", "delivered_by")


@dataclass(frozen=True)
class IncomingState:
    stage: IncomingStage = IncomingStage.LIST
    batch: tuple[DocumentDraft, ...] = ()
    current: DocumentDraft | None = None
    editing_index: int | None = None


@dataclass(frozen=True)
class StartManual:
    pass


@dataclass(frozen=True)
class StartScan:
    pass


@dataclass(frozen=True)
class AddSimilar:
    """Start a new manual entry prefilled from the last one."""


@dataclass(frozen=True)
class EditEntry:
    index: int


@dataclass(frozen=True)
class UpdateDraft:
    draft: DocumentDraft


@dataclass(frozen=True)
class Review:
    pass


@dataclass(frozen=True)
class ConfirmReview:
    pass


@dataclass(frozen=True)
class ScanCaptured:
    draft: DocumentDraft


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class SaveAll:
    pass


def start_incoming(start_mode: IntakeMethod | None = None) -> IncomingState:
    """Initial state, optionally jumping straight into a form."""
    if start_mode == IntakeMethod.MANUAL:
        return IncomingState(stage=IncomingStage.MANUAL_FORM, current=DocumentDraft())
    if start_mode == IntakeMethod.SCAN:
        return IncomingState(stage=IncomingStage.SCAN_FORM)
    return IncomingState()


def _require(draft: DocumentDraft, names: tuple[str, ...]) -> None:
    missing = [name for name in names if not (getattr(draft, name) or "").strip()]
    if missing:
        raise WorkflowError(f"Required fields missing: {', '.join(missing)}")


def _expect(state, *stages) -> None:
    current = getattr(state, "stage", None) or getattr(state, "step", None)
    if current not in stages:
        raise WorkflowError(f"Action not available in {current.value}")


def advance_incoming(state: IncomingState, event: object) -> IncomingState:
    """Apply ``event`` to the incoming batch workflow."""
    if isinstance(event, StartManual):
        _expect(state, IncomingStage.LIST)
        return replace(state, stage=IncomingStage.MANUAL_FORM, current=DocumentDraft(), editing_index=None)

    if isinstance(event, StartScan):
        _expect(state, IncomingStage.LIST)
        return replace(state, stage=IncomingStage.SCAN_FORM, current=None, editing_index=None)

    if isinstance(event, AddSimilar):
        _expect(state, IncomingStage.LIST)
        if not state.batch:
            raise WorkflowError("No documents in the list to copy from")
        return replace(
            state,
            stage=IncomingStage.MANUAL_FORM,
            current=replace(state.batch[-1], intake=IntakeMethod.MANUAL),
            editing_index=None,
        )

    if isinstance(event, EditEntry):
        _expect(state, IncomingStage.LIST)
        if not 0 <= event.index < len(state.batch):
            raise WorkflowError(f"No entry at position {event.index}")
        return replace(
            state,
            stage=IncomingStage.MANUAL_FORM,
            current=state.batch[event.index],
            editing_index=event.index,
        )

    if isinstance(event, UpdateDraft):
        _expect(state, IncomingStage.MANUAL_FORM)
        return replace(state, current=event.draft)

    if isinstance(event, Review):
        _expect(state, IncomingStage.MANUAL_FORM)
        _require(state.current, INCOMING_REQUIRED)
        return replace(state, stage=IncomingStage.REVIEW)

    if isinstance(event, ConfirmReview):
        _expect(state, IncomingStage.REVIEW)
        draft = replace(state.current, status=DocumentStatus.RECEIVED)
        batch = list(state.batch)
        if state.editing_index is not None:
            batch[state.editing_index] = draft
        else:
            batch.append(draft)
        return IncomingState(stage=IncomingStage.LIST, batch=tuple(batch))

    if isinstance(event, ScanCaptured):
        _expect(state, IncomingStage.SCAN_FORM)
        draft = replace(event.draft, status=DocumentStatus.RECEIVED, intake=IntakeMethod.SCAN)
        try:
            draft.validate()
        except ValidationError as e:
            raise WorkflowError(str(e)) from e
        return IncomingState(stage=IncomingStage.LIST, batch=(*state.batch, draft))

    if isinstance(event, Back):
        if state.stage == IncomingStage.REVIEW:
            return replace(state, stage=IncomingStage.MANUAL_FORM)
        _expect(state, IncomingStage.LIST, IncomingStage.MANUAL_FORM, IncomingStage.SCAN_FORM)
        if state.stage == IncomingStage.LIST or not state.batch:
            return IncomingState(stage=IncomingStage.CANCELLED)
        return IncomingState(stage=IncomingStage.LIST, batch=state.batch)

    if isinstance(event, SaveAll):
        _expect(state, IncomingStage.LIST)
        if not state.batch:
            raise WorkflowError("No documents to save")
        return replace(state, stage=IncomingStage.SAVED)

    raise WorkflowError(f"Unknown event: {type(event).__name__}")


# --- Outgoing manual entry (details, confirm, sign & dispatch) ---


class OutgoingStep(str, Enum):
    DETAILS = "details"
    CONFIRM = "confirm"
    SIGN = "sign"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OutgoingEntry:
    """One outgoing document as typed into the form."""

    minuted_to: str = ""
    description: str = ""
    file_no: str = ""
    name: str = ""
    image: str | None = None


OUTGOING_REQUIRED = ("minuted_to", "description", "file_no", "name")


@dataclass(frozen=True)
class OutgoingState:
    step: OutgoingStep = OutgoingStep.DETAILS
    batch: tuple[OutgoingEntry, ...] = ()
    current: OutgoingEntry = field(default_factory=OutgoingEntry)
    drafts: tuple[DocumentDraft, ...] = ()

    @property
    def entries(self) -> tuple[OutgoingEntry, ...]:
        """All entries that will be dispatched together."""
        return (*self.batch, self.current)


@dataclass(frozen=True)
class UpdateEntry:
    entry: OutgoingEntry


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class AddMore:
    pass


@dataclass(frozen=True)
class Sign:
    dispatched_by: str
    signature: str | None
    timestamp: datetime


def _check_entry(entry: OutgoingEntry) -> None:
    missing = [name for name in OUTGOING_REQUIRED if not getattr(entry, name).strip()]
    if missing:
        raise WorkflowError(f"Required fields missing: {', '.join(missing)}")
    if not entry.image:
        raise WorkflowError("A photo of the document is required")


def _outgoing_draft(entry: OutgoingEntry, event: Sign) -> DocumentDraft:
    return DocumentDraft(
        subject=entry.description,
        reference_number=entry.file_no,
        sender_name=entry.name,
        scanned_document=entry.image,
        status=DocumentStatus.DISPATCHED,
        dispatched_details=DispatchedDetails(
            recipient_name=entry.minuted_to,
            dispatched_by=event.dispatched_by,
            dispatched_date=event.timestamp,
            recipient_signature=event.signature or "",
            recipient_photo=entry.image or "",
        ),
    )


def advance_outgoing(state: OutgoingState, event: object) -> OutgoingState:
    """Apply ``event`` to the outgoing entry workflow."""
    if isinstance(event, UpdateEntry):
        _expect(state, OutgoingStep.DETAILS)
        return replace(state, current=event.entry)

    if isinstance(event, AddMore):
        _expect(state, OutgoingStep.DETAILS)
        _check_entry(state.current)
        return replace(state, batch=(*state.batch, state.current), current=OutgoingEntry())

    if isinstance(event, Next):
        if state.step == OutgoingStep.DETAILS:
            _check_entry(state.current)
            return replace(state, step=OutgoingStep.CONFIRM)
        _expect(state, OutgoingStep.CONFIRM)
        return replace(state, step=OutgoingStep.SIGN)

    if isinstance(event, Back):
        if state.step == OutgoingStep.DETAILS:
            return replace(state, step=OutgoingStep.CANCELLED)
        if state.step == OutgoingStep.CONFIRM:
            return replace(state, step=OutgoingStep.DETAILS)
        _expect(state, OutgoingStep.SIGN)
        return replace(state, step=OutgoingStep.CONFIRM)

    if isinstance(event, Sign):
        _expect(state, OutgoingStep.SIGN)
        if not event.signature:
            raise WorkflowError("Signature is required")
        if not event.dispatched_by.strip():
            raise WorkflowError("Dispatched by is required")
        drafts = tuple(_outgoing_draft(entry, event) for entry in state.entries)
        for draft in drafts:
            try:
                draft.validate()
            except ValidationError as e:
                raise WorkflowError(str(e)) from e
        return replace(state, step=OutgoingStep.DONE, drafts=drafts)

    raise WorkflowError(f"Unknown event: {type(event).__name__}")
