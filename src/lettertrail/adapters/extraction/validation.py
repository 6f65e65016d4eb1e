"""Validation of extraction responses."""

import json
import logging
import re
from datetime import date
from typing import Any

from ...domain.errors import ExtractionFailure
from ...domain.models import FieldSet
from .prompts import RESPONSE_KEYS

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def clean_field(value: Any) -> str:
    """Normalize one response value to stripped text without control chars."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ExtractionFailure(f"Expected text, got {type(value).__name__}")
    return _CONTROL_CHARS.sub("", value).strip()


def clean_letter_date(value: str) -> str:
    """Keep a YYYY-MM-DD date, blank anything else."""
    if not value:
        return ""
    if _DATE_PATTERN.match(value):
        try:
            date.fromisoformat(value)
            return value
        except ValueError:
            pass
    logger.warning(f"Invalid date format: {value[:40]}")
    return ""


def parse_field_set(text: str | None) -> FieldSet:
    """Parse a provider's JSON response into a FieldSet.

    Raises ExtractionFailure on an empty or unparsable body, or when any of
    the required keys is missing.
    """
    text = (text or "").strip()
    if not text:
        raise ExtractionFailure("Empty response from extraction service")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON response: {text[:200]}")
        raise ExtractionFailure(f"Unparsable response from extraction service: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionFailure("Extraction response is not a JSON object")

    missing = [key for key in RESPONSE_KEYS if key not in data]
    if missing:
        raise ExtractionFailure(f"Extraction response missing keys: {', '.join(missing)}")

    values = {name: clean_field(data[key]) for key, name in RESPONSE_KEYS.items()}
    values["letter_date"] = clean_letter_date(values["letter_date"])
    return FieldSet(**values)
