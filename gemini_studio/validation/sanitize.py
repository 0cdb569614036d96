# gemini_studio/validation/sanitize.py
"""
Input sanitization and validation utilities.

Rejects bad tool input before it reaches the queue or the gallery.
"""

import logging
import re

from fastmcp.exceptions import ToolError

from gemini_studio.models.jobs import AspectRatio
from gemini_studio.provider.data_url import decode_data_url

logger = logging.getLogger(__name__)


def sanitize_prompt(text: str, max_length: int = 5000) -> str:
    """
    Sanitize and validate prompt text.

    Strips whitespace and validates non-empty.
    Truncates to max_length if needed.

    Args:
        text: User-provided prompt
        max_length: Maximum allowed length (default 5000)

    Returns:
        Cleaned prompt string

    Raises:
        ToolError: If prompt is empty after stripping
    """
    cleaned = (text or "").strip()

    if not cleaned:
        raise ToolError("Prompt cannot be empty")

    if len(cleaned) > max_length:
        logger.warning(
            f"Prompt truncated from {len(cleaned)} to {max_length} characters"
        )
        cleaned = cleaned[:max_length]

    return cleaned


def sanitize_aspect_ratio(value: str) -> AspectRatio:
    """
    Parse an aspect ratio string such as "16:9".

    Raises:
        ToolError: If value is not one of the supported ratios
    """
    try:
        return AspectRatio((value or "").strip())
    except ValueError:
        allowed = ", ".join(r.value for r in AspectRatio)
        raise ToolError(f"Invalid aspect ratio '{value}': must be one of {allowed}")


def sanitize_id(value: str, kind: str = "job") -> str:
    """
    Sanitize and validate a job or gallery item ID.

    IDs must be alphanumeric with hyphens only, 8-64 characters.

    Args:
        value: User-provided ID
        kind: Label used in the error message

    Returns:
        Validated ID

    Raises:
        ToolError: If ID format is invalid
    """
    pattern = r"^[a-zA-Z0-9-]{8,64}$"
    if not re.match(pattern, value or ""):
        raise ToolError(
            f"Invalid {kind} ID '{value}': must be 8-64 alphanumeric characters or hyphens"
        )

    return value


def sanitize_job_id(job_id: str) -> str:
    return sanitize_id(job_id, kind="job")


def sanitize_item_id(item_id: str) -> str:
    return sanitize_id(item_id, kind="gallery item")


def sanitize_image_data_urls(images: list[str]) -> list[str]:
    """
    Validate that every entry is a base64 image data URL.

    Raises:
        ToolError: On the first malformed entry
    """
    cleaned = []
    for i, image in enumerate(images or []):
        try:
            mime_type, _ = decode_data_url(image.strip())
        except (ValueError, AttributeError) as e:
            raise ToolError(f"Reference image {i + 1} is not a valid data URL: {e}")
        if not mime_type.startswith("image/"):
            raise ToolError(f"Reference image {i + 1} has non-image type '{mime_type}'")
        cleaned.append(image.strip())
    return cleaned
