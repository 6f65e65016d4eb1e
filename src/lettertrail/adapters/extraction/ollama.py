"""Extraction adapter using Ollama vision models."""

import logging
from urllib.parse import urlparse

import httpx

from ...domain.errors import ExtractionFailure, ValidationError
from ...domain.images import split_data_url
from ...domain.models import FieldSet
from ...ports.extraction import ExtractionPort
from .prompts import EXTRACTION_PROMPT, JSON_SCHEMA
from .validation import parse_field_set

logger = logging.getLogger(__name__)


class OllamaAdapter(ExtractionPort):
    """Extraction implementation using a local Ollama server."""

    def __init__(
        self,
        model: str = "gemma3:4b",
        base_url: str = "http://localhost:11434",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"Invalid ollama_url scheme: {parsed.scheme}")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    async def extract(self, image: str) -> FieldSet:
        logger.info(f"Extracting details with Ollama ({self.model})")

        try:
            _, payload = split_data_url(image)
        except ValidationError as e:
            raise ExtractionFailure(f"Unusable image: {e}") from e

        request = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": EXTRACTION_PROMPT, "images": [payload]},
            ],
            "stream": False,
            "format": JSON_SCHEMA,
        }

        try:
            if self.client is not None:
                response = await self.client.post(f"{self.base_url}/api/chat", json=request)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(f"{self.base_url}/api/chat", json=request)
            response.raise_for_status()
            content = response.json()["message"]["content"]
        except httpx.HTTPError as e:
            raise ExtractionFailure(f"Extraction service unreachable: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise ExtractionFailure(f"Malformed response from Ollama: {e}") from e

        return parse_field_set(content)
