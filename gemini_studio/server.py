# gemini_studio/server.py
"""
FastMCP server instance with tool registration.

CRITICAL: configure_logging() is called first to prevent stdout pollution.
All logging goes to stderr as JSON.
"""

# Configure logging FIRST before any other imports
from gemini_studio.logging_config import configure_logging

configure_logging()

import logging

from fastmcp import FastMCP

from gemini_studio.background.lifecycle import ServerLifecycle
from gemini_studio.config.loader import get_db_path, load_config
from gemini_studio.config.schema import StudioConfig
from gemini_studio.models.sqlite_store import SQLiteKeyValueStore
from gemini_studio.provider.factory import create_provider
from gemini_studio.session import StudioSession
from gemini_studio.tools.download_image import download_image as _download_image
from gemini_studio.tools.enqueue_job import enqueue_job as _enqueue_job
from gemini_studio.tools.gallery import list_gallery as _list_gallery
from gemini_studio.tools.gallery import select_image as _select_image
from gemini_studio.tools.list_queue import list_queue as _list_queue
from gemini_studio.tools.list_queue import remove_job as _remove_job
from gemini_studio.tools.reference_images import (
    clear_reference_images as _clear_reference_images,
)
from gemini_studio.tools.reference_images import (
    remove_reference_image as _remove_reference_image,
)
from gemini_studio.tools.reference_images import (
    stage_reference_images as _stage_reference_images,
)
from gemini_studio.tools.upscale_image import upscale_image as _upscale_image

logger = logging.getLogger(__name__)

mcp = FastMCP("gemini-studio")

_config = load_config()
configure_logging(_config.output.verbosity)
logger.info(
    f"Loaded configuration: image_model={_config.gemini.image_model}, "
    f"multimodal_model={_config.gemini.multimodal_model}"
)

# Lifecycle manager (initialized by __main__.py)
_lifecycle: ServerLifecycle | None = None


def get_session() -> StudioSession:
    """
    Get the studio session from the lifecycle manager.

    Raises:
        RuntimeError: If lifecycle not initialized (should never happen)
    """
    if _lifecycle is None:
        raise RuntimeError("Server lifecycle not initialized. Call initialize_lifecycle() first.")
    return _lifecycle.session


async def initialize_lifecycle(config: StudioConfig | None = None) -> ServerLifecycle:
    """
    Initialize the server lifecycle (storage + gallery load + processor + signals).

    Must be called before any tool calls. Called by __main__.py on startup.

    Args:
        config: StudioConfig instance (defaults to module-level _config if None)
    """
    global _lifecycle

    actual_config = config or _config
    db_path = get_db_path(actual_config)
    logger.info(f"Initializing lifecycle with db_path={db_path}")

    _lifecycle = ServerLifecycle(
        SQLiteKeyValueStore(str(db_path)),
        create_provider(actual_config),
        config=actual_config,
    )
    await _lifecycle.startup()

    logger.info("Lifecycle initialized: SQLite + processor + signals ready")
    return _lifecycle


@mcp.tool()
def stage_reference_images(images: list[str]) -> dict:
    """Stage up to 4 reference images (base64 data URLs) for the next job. Extra images are dropped."""
    return _stage_reference_images(images, session=get_session())


@mcp.tool()
def remove_reference_image(index: int) -> dict:
    """Remove one staged reference image by 0-based position."""
    return _remove_reference_image(index, session=get_session())


@mcp.tool()
def clear_reference_images() -> dict:
    """Remove all staged reference images."""
    return _clear_reference_images(session=get_session())


@mcp.tool()
def enqueue_job(prompt: str, aspect_ratio: str = "1:1") -> dict:
    """Queue an image generation job using the staged reference images. Jobs run one at a time."""
    return _enqueue_job(prompt, aspect_ratio, session=get_session(), config=_config)


@mcp.tool()
def list_queue() -> dict:
    """List pending, processing, and failed generation jobs."""
    return _list_queue(session=get_session())


@mcp.tool()
def remove_job(job_id: str) -> dict:
    """Remove a pending or failed job from the queue."""
    return _remove_job(job_id, session=get_session())


@mcp.tool()
def list_gallery(limit: int | None = None) -> dict:
    """List generated images, newest first (image data omitted)."""
    return _list_gallery(session=get_session(), limit=limit)


@mcp.tool()
def select_image(item_id: str, include_src: bool = True) -> dict:
    """Select a gallery image and return its details, optionally with the image data URL."""
    return _select_image(item_id, session=get_session(), include_src=include_src)


@mcp.tool()
async def upscale_image(item_id: str, include_src: bool = False) -> dict:
    """Upscale a gallery image to 4x resolution, replacing it in the gallery."""
    return await _upscale_image(item_id, session=get_session(), include_src=include_src)


@mcp.tool()
def download_image(item_id: str, dest_dir: str | None = None) -> dict:
    """Save a gallery image to disk (defaults to the configured downloads directory)."""
    return _download_image(
        item_id, dest_dir or _config.output.downloads_dir, session=get_session()
    )


logger.info("MCP server initialized with 10 tools")
