# gemini_studio/background/worker.py
"""
Background queue processor for single-flight image generation.

Wakes on enqueue (or every poll_interval), runs one job at a time through
the provider, and folds the outcome into the queue and the gallery.
"""

import asyncio
import logging
import traceback

from gemini_studio.models.gallery import GalleryItem, GalleryStore, generate_item_id
from gemini_studio.models.jobs import Job, JobQueue
from gemini_studio.provider.base import GenerationError, ImageProvider

logger = logging.getLogger(__name__)

INTERRUPTED_MESSAGE = "Interrupted by shutdown"


class QueueProcessor:
    """
    Sequential generation job processor.

    Features:
        - Picks the oldest PENDING job (FIFO)
        - At most one provider call in flight (busy-flag admission gate)
        - Success: gallery prepend + job removed from queue
        - Failure: job marked FAILED with the provider's message, no retry
        - Busy flag released on every exit path
    """

    def __init__(
        self,
        queue: JobQueue,
        gallery: GalleryStore,
        provider: ImageProvider,
        poll_interval: float = 1.0,
    ) -> None:
        """
        Initialize queue processor.

        Args:
            queue: Job queue to drain
            gallery: Gallery receiving successful results
            provider: Image provider used for generation
            poll_interval: Seconds between queue checks when no enqueue signal arrives
        """
        self._queue = queue
        self._gallery = gallery
        self._provider = provider
        self._poll_interval = poll_interval
        self._busy = False
        self._current_job_id: str | None = None
        self._stopping = False
        self._task: asyncio.Task | None = None
        # Set whenever tick() releases the busy flag
        self._released = asyncio.Event()

        logger.info(f"Initialized QueueProcessor (poll_interval={poll_interval}s)")

    @property
    def busy(self) -> bool:
        """Whether a provider call is in flight."""
        return self._busy

    @property
    def current_job_id(self) -> str | None:
        """Get the currently processing job ID (None if idle)."""
        return self._current_job_id

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """
        Start the processor loop.

        Creates an asyncio task that waits for pending jobs.
        """
        if self._task is not None:
            logger.warning("Processor already started")
            return

        self._stopping = False
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Queue processor started")

    async def stop(self, timeout: float | None = None) -> None:
        """
        Stop the processor.

        An in-flight job is allowed to finish. If timeout (seconds) expires
        first, the loop is cancelled and the job is marked failed.

        Args:
            timeout: Max seconds to wait for an in-flight job (None = no limit)
        """
        if self._task is None:
            logger.warning("Processor not running")
            return

        logger.info("Stopping queue processor...")
        self._stopping = True

        if self._busy:
            logger.info(f"Waiting for in-flight job {self._current_job_id} to finish")
            await asyncio.wait({self._task}, timeout=timeout)

        if not self._task.done():
            self._task.cancel()

        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Processor task cancelled")

        self._task = None
        logger.info("Queue processor stopped")

    async def tick(self) -> bool:
        """
        Run at most one pending job to a terminal state.

        No-op when a job is already in flight or nothing is pending. The
        busy check and claim happen with no await in between, so concurrent
        tick() calls on the event loop can never both pass the gate.

        Returns:
            True if a job was processed
        """
        if self._busy:
            return False

        job = self._queue.next_pending()
        if job is None:
            return False

        self._busy = True
        self._current_job_id = job.job_id
        try:
            if not self._queue.mark_processing(job.job_id):
                return False
            await self._process_job(job)
            return True
        finally:
            self._busy = False
            self._current_job_id = None
            self._released.set()

    async def _run_loop(self) -> None:
        """
        Main loop: tick, and when idle wait for the enqueue signal.

        Handles CancelledError for shutdown.
        """
        logger.info("Processor loop started")

        try:
            while not self._stopping:
                try:
                    processed = await self.tick()
                except Exception:
                    logger.exception("Unexpected error in processor loop")
                    processed = False

                if not processed and not self._stopping:
                    await self._idle_wait()

        except asyncio.CancelledError:
            logger.info("Processor loop cancelled")
            raise

        logger.info("Processor loop exited")

    async def _idle_wait(self) -> None:
        """
        Suspend until the next tick could make progress.

        Every branch yields to the event loop: an already-set ready signal
        would otherwise let the loop spin while another tick holds the gate.
        """
        if self._busy:
            # A tick started elsewhere holds the gate; wake when it lets go
            self._released.clear()
            try:
                await asyncio.wait_for(self._released.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
        elif self._queue.has_pending():
            # Pending work that could not be claimed (another job is processing)
            await asyncio.sleep(self._poll_interval)
        else:
            await self._queue.wait_for_pending(self._poll_interval)

    async def _process_job(self, job: Job) -> None:
        """
        Generate one job's image and record the outcome.

        Args:
            job: Job snapshot already marked PROCESSING
        """
        logger.info(f"Picked up job {job.job_id} for processing")

        try:
            image = await self._provider.generate(
                job.prompt, job.aspect_ratio, job.reference_images
            )
            if not image:
                raise GenerationError(
                    "Image generation failed: No image data received from API."
                )

            item = GalleryItem(item_id=generate_item_id(), src=image, prompt=job.prompt)
            await self._gallery.prepend(item)
            self._queue.mark_completed(job.job_id)
            logger.info(f"Job {job.job_id} completed as gallery item {item.item_id}")

        except asyncio.CancelledError:
            logger.warning(f"Job {job.job_id} interrupted by shutdown")
            self._queue.mark_failed(job.job_id, INTERRUPTED_MESSAGE)
            raise

        except GenerationError as e:
            self._queue.mark_failed(job.job_id, e.message)
            logger.warning(f"Job {job.job_id} failed: {e.message}")

        except Exception as e:
            error_msg = f"{type(e).__name__}: {str(e)}"
            tb_lines = traceback.format_exception(type(e), e, e.__traceback__)
            tb_snippet = "".join(tb_lines[-3:])  # Last 3 lines of traceback

            self._queue.mark_failed(job.job_id, f"{error_msg}\n\n{tb_snippet}")
            logger.error(f"Job {job.job_id} failed: {error_msg}")
