"""Backing store using a JSON file on the local filesystem."""

import logging
import os
import tempfile
from pathlib import Path

from ...domain.errors import StoreCorruption
from ...ports.storage import BackingStorePort

logger = logging.getLogger(__name__)


class JsonFileStore(BackingStorePort):
    """Keeps the serialized collection in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> str | None:
        if not self.path.exists():
            logger.debug(f"No store at {self.path}")
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StoreCorruption(f"Store is not valid UTF-8: {e}") from e

    def write(self, text: str) -> None:
        """Write through a temp file so readers never see a partial store."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = Path(tmp.name)

        try:
            with tmp:
                tmp.write(text)
            os.replace(tmp_path, self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        logger.debug(f"Wrote store: {self.path}")
