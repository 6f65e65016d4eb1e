"""Ports - interfaces for external dependencies."""

from .extraction import ExtractionPort
from .rasterizer import RasterizerPort
from .storage import BackingStorePort

__all__ = ["BackingStorePort", "ExtractionPort", "RasterizerPort"]
