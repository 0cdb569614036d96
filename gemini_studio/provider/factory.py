# gemini_studio/provider/factory.py
"""Factory for creating the configured image provider."""

import os

from gemini_studio.config.schema import StudioConfig

from .gemini import GeminiImageClient


def resolve_api_key(config: StudioConfig) -> str | None:
    """Config value first, then GEMINI_API_KEY, then API_KEY."""
    return (
        config.gemini.api_key
        or os.environ.get("GEMINI_API_KEY")
        or os.environ.get("API_KEY")
    )


def create_provider(config: StudioConfig) -> GeminiImageClient:
    """
    Create the image provider from config.

    Args:
        config: Root StudioConfig

    Returns:
        GeminiImageClient configured from config.gemini
    """
    gemini = config.gemini
    return GeminiImageClient(
        api_key=resolve_api_key(config),
        base_url=gemini.base_url,
        image_model=gemini.image_model,
        multimodal_model=gemini.multimodal_model,
        timeout=gemini.timeout,
        max_reference_images=gemini.max_reference_images,
    )
