# gemini_studio/tools/upscale_image.py
"""
upscale_image tool implementation.

Runs outside the generation queue and replaces the item's image on success.
"""

import logging

from fastmcp.exceptions import ToolError

from gemini_studio.provider.base import GenerationError
from gemini_studio.session import StudioSession
from gemini_studio.tools.gallery import image_detail
from gemini_studio.validation.sanitize import sanitize_item_id

logger = logging.getLogger(__name__)


async def upscale_image(item_id: str, session: StudioSession, include_src: bool = False) -> dict:
    """
    Upscale a gallery item to higher resolution.

    Args:
        item_id: Gallery item identifier
        session: Studio session
        include_src: Whether to return the new image data URL

    Returns:
        ImageDetailResponse as dict

    Raises:
        ToolError: If item_id is invalid, not found, or the provider fails
    """
    sanitized_id = sanitize_item_id(item_id)

    try:
        item = await session.on_upscale_requested(sanitized_id)
    except KeyError:
        raise ToolError(
            f"Gallery item '{sanitized_id}' not found. Use list_gallery to see items."
        )
    except GenerationError as e:
        logger.warning(f"Upscale failed for {sanitized_id}: {e.message}")
        raise ToolError(f"Upscale failed: {e.message}")

    return image_detail(item, include_src, message="Image upscaled.")
