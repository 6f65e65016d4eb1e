"""Encoded image helpers.

Images travel through the system as opaque ``data:`` URLs, the form produced
by the capture widgets and accepted by the extraction providers.
"""

import base64
import binascii

from .errors import ValidationError


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def split_data_url(url: str) -> tuple[str, str]:
    """Split a base64 data URL into (mime_type, base64 payload)."""
    if not url.startswith("data:") or "," not in url:
        raise ValidationError("Not a data URL")
    header, payload = url[5:].split(",", 1)
    mime_type, _, encoding = header.partition(";")
    if encoding != "base64":
        raise ValidationError(f"Unsupported data URL encoding: {encoding or 'none'}")
    return mime_type or "application/octet-stream", payload


def decode_data_url(url: str) -> tuple[str, bytes]:
    """Decode a base64 data URL into (mime_type, raw bytes)."""
    mime_type, payload = split_data_url(url)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValidationError(f"Invalid base64 payload: {e}") from e
