# gemini_studio/tools/download_image.py
"""
download_image tool implementation.

Writes a gallery item's image to disk as gemini-studio-pro-<id>.<ext>.
"""

import logging
from pathlib import Path

from fastmcp.exceptions import ToolError

from gemini_studio.models.responses import DownloadResponse
from gemini_studio.provider.data_url import decode_data_url, extension_for
from gemini_studio.session import StudioSession
from gemini_studio.validation.sanitize import sanitize_item_id

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "gemini-studio-pro-"


def download_image(item_id: str, dest_dir: str | Path, session: StudioSession) -> dict:
    """
    Save a gallery item's image to a directory.

    Args:
        item_id: Gallery item identifier
        dest_dir: Target directory (created if missing)
        session: Studio session

    Returns:
        DownloadResponse as dict

    Raises:
        ToolError: If the item is unknown, its payload is corrupt, or the write fails
    """
    sanitized_id = sanitize_item_id(item_id)
    item = session.gallery.get(sanitized_id)
    if item is None:
        raise ToolError(
            f"Gallery item '{sanitized_id}' not found. Use list_gallery to see items."
        )

    try:
        mime_type, data = decode_data_url(item.src)
    except ValueError as e:
        raise ToolError(f"Gallery item '{sanitized_id}' has an unreadable image: {e}")

    output_dir = Path(dest_dir)
    file_path = output_dir / f"{FILENAME_PREFIX}{sanitized_id}.{extension_for(mime_type)}"
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)
    except OSError as e:
        raise ToolError(f"Could not write {file_path}: {e}")

    logger.info(f"Downloaded gallery item {sanitized_id} to {file_path}")
    return DownloadResponse(
        item_id=sanitized_id, file_path=str(file_path), size_bytes=len(data)
    ).model_dump()
