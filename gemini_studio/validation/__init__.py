"""Input validation and sanitization utilities."""

from .sanitize import (
    sanitize_aspect_ratio,
    sanitize_image_data_urls,
    sanitize_item_id,
    sanitize_job_id,
    sanitize_prompt,
)

__all__ = [
    "sanitize_prompt",
    "sanitize_aspect_ratio",
    "sanitize_job_id",
    "sanitize_item_id",
    "sanitize_image_data_urls",
]
