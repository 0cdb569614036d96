# gemini_studio/tools/reference_images.py
"""
Reference image staging tool implementations.

Stage, remove, and clear the images attached to the next enqueued job.
"""

import logging

from fastmcp.exceptions import ToolError

from gemini_studio.models.responses import StagingResponse
from gemini_studio.session import StudioSession
from gemini_studio.validation.sanitize import sanitize_image_data_urls

logger = logging.getLogger(__name__)


def _staging_response(session: StudioSession, accepted: int = 0, dropped: int = 0) -> dict:
    return StagingResponse(
        staged_count=len(session.staging),
        accepted=accepted,
        dropped=dropped,
        remaining=session.staging.remaining,
    ).model_dump()


def stage_reference_images(images: list[str], session: StudioSession) -> dict:
    """
    Stage reference images for the next job.

    Images beyond the 4-image capacity are dropped without error and are
    never validated.

    Args:
        images: Base64 image data URLs
        session: Studio session

    Returns:
        StagingResponse as dict

    Raises:
        ToolError: If an entry that fits in staging is not an image data URL
    """
    incoming = list(images or [])
    cleaned = sanitize_image_data_urls(incoming[: session.staging.remaining])
    accepted = session.on_stage_images(cleaned)

    logger.info(
        f"Staged {len(accepted)} reference image(s) ({len(session.staging)} total)"
    )
    return _staging_response(
        session, accepted=len(accepted), dropped=len(incoming) - len(accepted)
    )


def remove_reference_image(index: int, session: StudioSession) -> dict:
    """
    Remove one staged image by 0-based position.

    Raises:
        ToolError: If index is out of range
    """
    try:
        session.on_remove_staged(index)
    except IndexError as e:
        raise ToolError(str(e))

    return _staging_response(session)


def clear_reference_images(session: StudioSession) -> dict:
    """Remove all staged images."""
    session.on_clear_staged()
    return _staging_response(session)
