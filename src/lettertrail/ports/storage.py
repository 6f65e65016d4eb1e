"""Storage port - interface for the backing store of the document collection."""

from abc import ABC, abstractmethod


class BackingStorePort(ABC):
    """Interface for persisting the serialized document collection."""

    @abstractmethod
    def read(self) -> str | None:
        """Return the stored text, or None if nothing was stored yet.

        Raises StoreCorruption if the stored bytes cannot be read as text.
        """
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the stored text."""
        pass
