"""Backing store adapters."""

from .json_file import JsonFileStore
from .memory import InMemoryStore

__all__ = ["InMemoryStore", "JsonFileStore"]
