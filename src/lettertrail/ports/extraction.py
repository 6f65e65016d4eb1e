"""Extraction port - interface for document detail extraction."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import FieldSet


class ExtractionPort(ABC):
    """Interface for image-based detail extraction."""

    @abstractmethod
    async def extract(self, image: str) -> "FieldSet":
        """Extract document details from an encoded image (data URL).

        Raises ExtractionFailure on transport errors or malformed responses.
        """
        pass
