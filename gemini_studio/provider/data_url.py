# gemini_studio/provider/data_url.py
"""Helpers for the data URLs used as image payloads throughout the studio."""

import base64
import binascii
import mimetypes
import re
from pathlib import Path

_DATA_URL_RE = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/heic": "heic",
    "image/heif": "heif",
}


def parse_data_url(data_url: str) -> tuple[str, str]:
    """
    Split a base64 data URL into its MIME type and payload.

    Returns:
        (mime_type, base64_payload)

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise ValueError("Invalid base64 string format")
    return match.group(1), match.group(2)


def to_data_url(payload_b64: str, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{payload_b64}"


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Decode a data URL to raw bytes.

    Raises:
        ValueError: If the URL or its base64 payload is malformed
    """
    mime_type, payload = parse_data_url(data_url)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def extension_for(mime_type: str) -> str:
    """File extension (without dot) for an image MIME type, defaulting to png."""
    return _EXTENSIONS.get(mime_type.lower(), "png")


def file_to_data_url(path: str | Path) -> str:
    """
    Read an image file and encode it as a data URL.

    Raises:
        ValueError: If the file does not look like an image
        OSError: If the file cannot be read
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {path}")
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return to_data_url(encoded, mime_type)
