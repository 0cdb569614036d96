"""Image provider integration: Gemini client, data URL helpers, and retry logic."""

from .base import GenerationError, ImageProvider
from .factory import create_provider
from .gemini import GeminiImageClient
from .retry import gemini_retry

__all__ = [
    "GenerationError",
    "ImageProvider",
    "GeminiImageClient",
    "create_provider",
    "gemini_retry",
]
