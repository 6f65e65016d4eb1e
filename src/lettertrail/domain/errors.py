"""Domain exceptions."""


class LettertrailError(Exception):
    """Base class for all domain errors."""


class ValidationError(LettertrailError):
    """Caller-supplied fields failed required-field checks."""


class WorkflowError(ValidationError):
    """An event is not valid for the current workflow stage."""


class ExtractionFailure(LettertrailError):
    """Detail extraction for a single image failed."""


class StoreCorruption(LettertrailError):
    """The persisted collection could not be parsed."""


class InvalidTransition(LettertrailError):
    """A status change violates the lifecycle rules."""


class NotFound(LettertrailError):
    """No document exists with the requested id."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id
