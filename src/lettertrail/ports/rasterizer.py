"""Rasterizer port - interface for rendering paginated documents."""

from abc import ABC, abstractmethod


class RasterizerPort(ABC):
    """Interface for turning PDF pages into images."""

    @abstractmethod
    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        """Render every page, in document order, to an encoded image.

        Returns one data URL per page.
        """
        pass
