# gemini_studio/tools/gallery.py
"""
list_gallery and select_image tool implementations.

Image payloads are omitted from listings; select_image can include one.
"""

import logging

from fastmcp.exceptions import ToolError

from gemini_studio.models.gallery import GalleryItem
from gemini_studio.models.responses import (
    GalleryResponse,
    GallerySummary,
    ImageDetailResponse,
)
from gemini_studio.provider.data_url import decode_data_url
from gemini_studio.session import StudioSession
from gemini_studio.validation.sanitize import sanitize_item_id

logger = logging.getLogger(__name__)


def describe_image(src: str) -> tuple[str, int]:
    """(mime_type, decoded size) of a data URL; ("unknown", 0) if malformed."""
    try:
        mime_type, data = decode_data_url(src)
    except ValueError:
        return "unknown", 0
    return mime_type, len(data)


def image_detail(item: GalleryItem, include_src: bool, message: str | None = None) -> dict:
    mime_type, size = describe_image(item.src)
    return ImageDetailResponse(
        item_id=item.item_id,
        prompt=item.prompt,
        mime_type=mime_type,
        size_bytes=size,
        src=item.src if include_src else None,
        message=message,
    ).model_dump()


def list_gallery(session: StudioSession, limit: int | None = None) -> dict:
    """
    List gallery items, newest first.

    Args:
        session: Studio session
        limit: Optional maximum number of items

    Returns:
        GalleryResponse as dict
    """
    items = session.gallery_items
    total = len(items)
    if limit is not None:
        items = items[: max(limit, 0)]

    summaries = []
    for item in items:
        mime_type, size = describe_image(item.src)
        summaries.append(
            GallerySummary(
                item_id=item.item_id,
                prompt=item.prompt,
                mime_type=mime_type,
                size_bytes=size,
            )
        )

    return GalleryResponse(items=summaries, total=total).model_dump()


def select_image(item_id: str, session: StudioSession, include_src: bool = True) -> dict:
    """
    Select a gallery item for detail view.

    Raises:
        ToolError: If item_id is invalid or not in the gallery
    """
    sanitized_id = sanitize_item_id(item_id)
    item = session.on_select_image(sanitized_id)
    if item is None:
        raise ToolError(
            f"Gallery item '{sanitized_id}' not found. Use list_gallery to see items."
        )
    return image_detail(item, include_src)
