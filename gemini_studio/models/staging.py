# gemini_studio/models/staging.py
"""Reference image staging: the images attached to the next enqueued job."""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

MAX_REFERENCE_IMAGES = 4


class ReferenceImageStaging:
    """
    Transient buffer of up to MAX_REFERENCE_IMAGES data URLs.

    Over-capacity additions are truncated silently. capture() hands the
    current images to a job and replaces the buffer with a fresh list.
    """

    def __init__(self) -> None:
        self._images: list[str] = []

    def __len__(self) -> int:
        return len(self._images)

    @property
    def images(self) -> tuple[str, ...]:
        return tuple(self._images)

    @property
    def remaining(self) -> int:
        return MAX_REFERENCE_IMAGES - len(self._images)

    def add(self, images: Iterable[str]) -> list[str]:
        """
        Append images up to the remaining capacity.

        Args:
            images: Data URLs to stage

        Returns:
            The images that were accepted
        """
        incoming = list(images)
        accepted = incoming[: self.remaining]
        self._images = self._images + accepted

        if len(accepted) < len(incoming):
            logger.debug(
                f"Staging full: dropped {len(incoming) - len(accepted)} of "
                f"{len(incoming)} image(s)"
            )
        return accepted

    def remove(self, index: int) -> str:
        """
        Remove one staged image by position.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self._images):
            raise IndexError(
                f"No staged image at position {index} ({len(self._images)} staged)"
            )
        removed = self._images[index]
        self._images = self._images[:index] + self._images[index + 1 :]
        return removed

    def clear(self) -> None:
        self._images = []

    def capture(self) -> tuple[str, ...]:
        """Snapshot the staged images and clear the buffer."""
        snapshot = tuple(self._images)
        self._images = []
        return snapshot
