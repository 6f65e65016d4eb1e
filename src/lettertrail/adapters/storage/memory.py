"""In-memory backing store."""

from ...ports.storage import BackingStorePort


class InMemoryStore(BackingStorePort):
    """Keeps the serialized collection in memory."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.writes = 0

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1
