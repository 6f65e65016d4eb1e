"""Domain layer - core business logic."""

from .errors import (
    ExtractionFailure,
    InvalidTransition,
    LettertrailError,
    NotFound,
    StoreCorruption,
    ValidationError,
    WorkflowError,
)
from .models import (
    BatchItem,
    CommonFields,
    DispatchedDetails,
    Document,
    DocumentDraft,
    DocumentStatus,
    FieldSet,
    IntakeMethod,
    ProcessingState,
    StatusEntry,
)

__all__ = [
    "BatchItem",
    "CommonFields",
    "DispatchedDetails",
    "Document",
    "DocumentDraft",
    "DocumentStatus",
    "ExtractionFailure",
    "FieldSet",
    "IntakeMethod",
    "InvalidTransition",
    "LettertrailError",
    "NotFound",
    "ProcessingState",
    "StatusEntry",
    "StoreCorruption",
    "ValidationError",
    "WorkflowError",
]
