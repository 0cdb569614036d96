# gemini_studio/session.py
"""
Studio session: the explicitly owned state behind one user's workspace.

Holds reference image staging, the job queue, the gallery and the current
selection, and exposes the intents the presentation layer forwards.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from gemini_studio.models.gallery import GalleryItem, GalleryStore
from gemini_studio.models.jobs import AspectRatio, Job, JobQueue, JobStatus
from gemini_studio.models.staging import ReferenceImageStaging
from gemini_studio.models.store import InMemoryKeyValueStore, KeyValueStore
from gemini_studio.provider.base import GenerationError, ImageProvider

if TYPE_CHECKING:
    from gemini_studio.background.worker import QueueProcessor

logger = logging.getLogger(__name__)


class StudioSession:
    """
    One independent studio workspace.

    Upscaling does not go through the queue: it runs on the caller's task
    and may overlap a queued generation.
    """

    def __init__(
        self,
        provider: ImageProvider,
        store: KeyValueStore | None = None,
        gallery_key: str = "gemini-studio-gallery",
    ) -> None:
        """
        Initialize a session.

        Args:
            provider: Image provider for generation and upscaling
            store: Persistence adapter for the gallery (in-memory if None)
            gallery_key: Slot name holding the serialized gallery
        """
        self.provider = provider
        self.store = store or InMemoryKeyValueStore()
        self.staging = ReferenceImageStaging()
        self.queue = JobQueue()
        self.gallery = GalleryStore(self.store, key=gallery_key)
        self._selected_item_id: str | None = None
        # Set by ServerLifecycle so is_processing reflects the processor's gate
        self.processor: "QueueProcessor | None" = None

    async def load(self) -> None:
        """Load the persisted gallery."""
        await self.gallery.load()

    # -- read-only state -------------------------------------------------

    @property
    def jobs(self) -> list[Job]:
        return self.queue.list_all()

    @property
    def gallery_items(self) -> list[GalleryItem]:
        return self.gallery.list_all()

    @property
    def staged_images(self) -> tuple[str, ...]:
        return self.staging.images

    @property
    def is_processing(self) -> bool:
        if self.processor is not None and self.processor.busy:
            return True
        return self.queue.processing_job() is not None

    @property
    def selected_item(self) -> GalleryItem | None:
        """The selected gallery item with its latest image, if any."""
        if self._selected_item_id is None:
            return None
        return self.gallery.get(self._selected_item_id)

    # -- intents ---------------------------------------------------------

    def on_stage_images(self, images: Iterable[str]) -> list[str]:
        return self.staging.add(images)

    def on_remove_staged(self, index: int) -> str:
        return self.staging.remove(index)

    def on_clear_staged(self) -> None:
        self.staging.clear()

    def on_enqueue(self, prompt: str, aspect_ratio: AspectRatio | str) -> Job:
        """
        Enqueue a job with the currently staged reference images.

        Staging is cleared only once the job exists, so a rejected prompt
        keeps the user's images.

        Raises:
            ValueError: If prompt is empty or aspect_ratio unknown
        """
        job = self.queue.enqueue(prompt, AspectRatio(aspect_ratio), self.staging.images)
        self.staging.capture()
        return job

    def on_remove_job(self, job_id: str) -> bool:
        return self.queue.remove_job(job_id)

    def on_select_image(self, item_id: str | None) -> GalleryItem | None:
        """
        Select a gallery item (None clears the selection).

        Returns:
            The selected item, or None if cleared or unknown
        """
        if item_id is None:
            self._selected_item_id = None
            return None

        item = self.gallery.get(item_id)
        self._selected_item_id = item.item_id if item else None
        return item

    async def on_upscale_requested(self, item_id: str) -> GalleryItem:
        """
        Upscale a gallery item and replace its image.

        Returns:
            The updated item

        Raises:
            KeyError: If item_id is not in the gallery
            GenerationError: If the provider fails (gallery unchanged)
        """
        item = self.gallery.get(item_id)
        if item is None:
            raise KeyError(item_id)

        logger.info(f"Upscale requested for gallery item {item_id}")
        new_src = await self.provider.upscale(item.src)
        if not new_src:
            raise GenerationError("Upscaling failed: No image data received from API.")

        updated = await self.gallery.update_src(item_id, new_src)
        if updated is None:
            # Item vanished while the provider call was in flight
            raise KeyError(item_id)
        return updated

    def queue_counts(self) -> dict[str, int]:
        """Job counts per status (completed jobs are not retained)."""
        counts = {status.value: 0 for status in JobStatus}
        for job in self.queue.list_all():
            counts[job.status.value] += 1
        return counts
