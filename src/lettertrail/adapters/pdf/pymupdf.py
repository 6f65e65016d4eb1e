"""Rasterizer adapter using PyMuPDF."""

import logging

import pymupdf

from ...config import DEFAULT_PDF_SCALE
from ...domain.images import encode_data_url
from ...ports.rasterizer import RasterizerPort

logger = logging.getLogger(__name__)


class PyMuPdfRasterizer(RasterizerPort):
    """Renders PDF pages to PNG images using PyMuPDF."""

    def __init__(self, scale: float = DEFAULT_PDF_SCALE) -> None:
        self.scale = scale

    def render_pages(self, pdf_bytes: bytes) -> list[str]:
        matrix = pymupdf.Matrix(self.scale, self.scale)
        images = []

        with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
            for page in doc:
                pixmap = page.get_pixmap(matrix=matrix)
                images.append(encode_data_url(pixmap.tobytes("png"), "image/png"))

        logger.debug(f"Rendered {len(images)} pages at scale {self.scale}")
        return images
