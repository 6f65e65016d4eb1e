"""PDF rasterizer adapters."""

from .pymupdf import PyMuPdfRasterizer

__all__ = ["PyMuPdfRasterizer"]
