"""Extraction adapter using Claude API."""

import logging

import anthropic

from ...domain.errors import ExtractionFailure, ValidationError
from ...domain.images import split_data_url
from ...domain.models import FieldSet
from ...ports.extraction import ExtractionPort
from .prompts import EXTRACTION_PROMPT
from .validation import parse_field_set

logger = logging.getLogger(__name__)

# Other intake types (BMP, TIFF) fail per item under this provider
SUPPORTED_MEDIA_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class ClaudeAPIAdapter(ExtractionPort):
    """Extraction implementation using Claude API (pay-as-you-go)."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        timeout: float | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        if client is None:
            try:
                client = anthropic.AsyncAnthropic(timeout=timeout)
            except anthropic.AnthropicError as e:
                raise ExtractionFailure(f"Claude API client unavailable: {e}") from e
            if client.api_key is None and client.auth_token is None:
                raise ExtractionFailure("ANTHROPIC_API_KEY is not set")
        self.client = client
        self.model = model

    async def extract(self, image: str) -> FieldSet:
        logger.info("Extracting details with Claude API")

        try:
            media_type, payload = split_data_url(image)
        except ValidationError as e:
            raise ExtractionFailure(f"Unusable image: {e}") from e
        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise ExtractionFailure(f"Unsupported image type: {media_type}")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                system=EXTRACTION_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {"type": "base64", "media_type": media_type, "data": payload},
                            },
                            {"type": "text", "text": "Extract the details of this document."},
                        ],
                    }
                ],
            )
        except anthropic.APIError as e:
            raise ExtractionFailure(f"Extraction service error: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return parse_field_set(text)
