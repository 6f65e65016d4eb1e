"""Shared test fixtures."""

import asyncio
from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from lettertrail.adapters.storage import InMemoryStore
from lettertrail.domain.errors import ExtractionFailure
from lettertrail.domain.models import DispatchedDetails, DocumentDraft, FieldSet, IntakeMethod
from lettertrail.domain.store import DocumentStore
from lettertrail.ports.extraction import ExtractionPort
from lettertrail.ports.rasterizer import RasterizerPort

IMAGE = "data:image/png;base64,aGVsbG8="
SIGNATURE = "data:image/png;base64,c2lnbmF0dXJl"
PHOTO = "data:image/jpeg;base64,cGhvdG8="
START = datetime(2024, 3, 15, 9, 30, 0, 123456, tzinfo=timezone.utc)


class SteppingClock:
    """Clock that advances one minute per call."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


class FakeExtractor(ExtractionPort):
    """Extractor with per-image delays and failures."""

    def __init__(
        self,
        results: dict[str, FieldSet] | None = None,
        failures: dict[str, str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.results = results or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def extract(self, image: str) -> FieldSet:
        self.calls.append(image)
        await asyncio.sleep(self.delays.get(image, 0))
        self.completed.append(image)
        if image in self.failures:
            raise ExtractionFailure(self.failures[image])
        return self.results.get(image, FieldSet(subject=f"Subject of {image}"))


class FakeRasterizer(RasterizerPort):
    """Rasterizer that reads the page count from the fake PDF body."""

    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        if not pdf_bytes.startswith(b"%PDF"):
            raise ValueError("not a PDF")
        count = int(pdf_bytes.split(b"pages=")[1])
        return [f"data:image/png;base64,cGFnZQ{n}" for n in range(1, count + 1)]


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def backing() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def store(backing: InMemoryStore, clock: SteppingClock) -> DocumentStore:
    return DocumentStore(backing, clock=clock)


@pytest.fixture
def sample_draft() -> DocumentDraft:
    """Sample creation request for an incoming letter."""
    return DocumentDraft(
        subject="Budget Report",
        sender_name="Finance Dept",
        reference_number="FIN/2024/017",
        originating_division="Treasury",
        letter_date=date(2024, 3, 1),
        scanned_document=IMAGE,
        delivered_by="Courier A",
        intake=IntakeMethod.SCAN,
    )


@pytest.fixture
def sample_details() -> DispatchedDetails:
    """Fully populated dispatch proof, taken after START."""
    return DispatchedDetails(
        recipient_name="J. Doe",
        dispatched_by="Front Desk",
        dispatched_date=START + timedelta(days=2),
        recipient_signature=SIGNATURE,
        recipient_photo=PHOTO,
    )


@pytest.fixture
def mock_extractor() -> MagicMock:
    """Mock extraction port."""
    mock = MagicMock(spec=ExtractionPort)
    mock.extract.return_value = FieldSet(
        letter_date="2024-03-01",
        sender_name="Finance Dept",
        subject="Budget Report",
        reference_number="FIN/2024/017",
        originating_division="Treasury",
    )
    return mock
