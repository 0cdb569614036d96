# gemini_studio/provider/base.py
"""Image provider contract consumed by the queue processor and upscale flow."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from gemini_studio.models.jobs import AspectRatio


class GenerationError(Exception):
    """
    Provider failure with a human-readable message.

    block_reason is set when the request was refused by a content policy.
    """

    def __init__(self, message: str, block_reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.block_reason = block_reason

    @classmethod
    def blocked(cls, reason: str) -> "GenerationError":
        return cls(f"Request blocked: {reason}.", block_reason=reason)


class ImageProvider(ABC):
    """
    Abstract base class for image generation backends.

    Both methods return a data URL and raise GenerationError on failure.
    """

    @property
    def max_reference_images(self) -> int | None:
        """Reference images honoured per generation (None = all)."""
        return None

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        aspect_ratio: AspectRatio,
        reference_images: Sequence[str] = (),
    ) -> str:
        """
        Generate one image.

        Args:
            prompt: Text prompt
            aspect_ratio: Requested aspect ratio (text-to-image path)
            reference_images: Data URLs conditioning the generation

        Returns:
            Data URL of the generated image

        Raises:
            GenerationError: On API failure, policy block, or empty response
        """
        pass

    @abstractmethod
    async def upscale(self, image: str) -> str:
        """
        Return an enhanced-resolution version of an image.

        Raises:
            GenerationError: On API failure, policy block, or empty response
        """
        pass

    async def aclose(self) -> None:
        """Release network resources (no-op by default)."""
