# gemini_studio/models/jobs.py
"""
Job tracking models and the in-memory generation queue.

Internal models (NOT exposed via MCP) for managing generation jobs.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from gemini_studio.models.staging import MAX_REFERENCE_IMAGES

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Job lifecycle states."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AspectRatio(Enum):
    """Aspect ratios accepted by the text-to-image path."""

    SQUARE = "1:1"
    WIDESCREEN = "16:9"
    PORTRAIT = "9:16"
    LANDSCAPE = "4:3"
    TALL = "3:4"


@dataclass
class Job:
    """
    Internal job record (NOT Pydantic - not exposed via MCP).

    reference_images is a tuple so the snapshot taken at enqueue time
    cannot be changed through staging afterwards.
    """

    job_id: str
    prompt: str
    reference_images: tuple[str, ...]
    aspect_ratio: AspectRatio
    status: JobStatus
    created_at: datetime
    error: str | None = None  # Error message if status=FAILED
    updated_at: datetime | None = None


class JobQueue:
    """
    Ordered in-memory queue of generation jobs.

    Insertion order is the FIFO order. Completed jobs leave the queue;
    failed jobs stay until removed so their error stays visible.
    All mark_* operations are no-ops for unknown ids, since a job can be
    removed while the worker is awaiting the provider.
    """

    def __init__(self) -> None:
        """Initialize empty queue."""
        self._jobs: dict[str, Job] = {}
        self._ready = asyncio.Event()
        logger.info("Initialized JobQueue")

    def __len__(self) -> int:
        return len(self._jobs)

    def enqueue(
        self,
        prompt: str,
        aspect_ratio: AspectRatio,
        reference_images: tuple[str, ...] | list[str] = (),
    ) -> Job:
        """
        Append a new pending job to the tail of the queue.

        Args:
            prompt: Text prompt (must be non-empty after stripping)
            aspect_ratio: Requested aspect ratio
            reference_images: Data URLs captured from staging (0-4)

        Returns:
            Copy of the created Job

        Raises:
            ValueError: If prompt is empty or too many reference images are given
        """
        cleaned = prompt.strip() if prompt else ""
        if not cleaned:
            raise ValueError("Prompt cannot be empty")

        images = tuple(reference_images)
        if len(images) > MAX_REFERENCE_IMAGES:
            raise ValueError(
                f"At most {MAX_REFERENCE_IMAGES} reference images allowed, got {len(images)}"
            )

        job = Job(
            job_id=generate_job_id(),
            prompt=cleaned,
            reference_images=images,
            aspect_ratio=AspectRatio(aspect_ratio),
            status=JobStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        self._jobs[job.job_id] = job
        self._ready.set()

        logger.info(
            f"Enqueued job {job.job_id} ({job.aspect_ratio.value}, "
            f"{len(images)} reference image(s)): {cleaned[:80]}"
        )
        return replace(job)

    def get(self, job_id: str) -> Job | None:
        """Get a copy of a job by ID, or None."""
        job = self._jobs.get(job_id)
        return replace(job) if job else None

    def list_all(self) -> list[Job]:
        """
        List all jobs.

        Returns:
            Copies of all jobs in submission order (oldest first)
        """
        return [replace(job) for job in self._jobs.values()]

    def has_pending(self) -> bool:
        return any(j.status == JobStatus.PENDING for j in self._jobs.values())

    def processing_job(self) -> Job | None:
        """Return a copy of the job currently processing, if any."""
        for job in self._jobs.values():
            if job.status == JobStatus.PROCESSING:
                return replace(job)
        return None

    def next_pending(self) -> Job | None:
        """
        Get the next pending job (FIFO - oldest first).

        Returns:
            Copy of the earliest-submitted pending Job, or None
        """
        for job in self._jobs.values():
            if job.status == JobStatus.PENDING:
                return replace(job)
        return None

    def mark_processing(self, job_id: str) -> bool:
        """
        Transition a pending job to processing.

        Refuses if another job is already processing, keeping the
        single-processing invariant.

        Returns:
            True if the transition was applied
        """
        job = self._jobs.get(job_id)
        if job is None:
            logger.debug(f"mark_processing ignored: job {job_id} not in queue")
            return False
        if job.status != JobStatus.PENDING:
            logger.warning(f"mark_processing ignored: job {job_id} is {job.status.value}")
            return False

        current = self.processing_job()
        if current is not None:
            logger.warning(
                f"mark_processing refused for {job_id}: {current.job_id} already processing"
            )
            return False

        self._set_status(job, JobStatus.PROCESSING)
        self._sync_ready()
        return True

    def mark_completed(self, job_id: str) -> bool:
        """
        Mark a job completed, which removes it from the queue.

        Returns:
            True if the job was present and removed
        """
        job = self._jobs.pop(job_id, None)
        if job is None:
            logger.debug(f"mark_completed ignored: job {job_id} not in queue")
            return False

        logger.info(f"Job {job_id} completed and left the queue")
        self._sync_ready()
        return True

    def mark_failed(self, job_id: str, message: str) -> bool:
        """
        Mark a job failed with an error message. The job stays in the queue.

        Returns:
            True if the job was present and updated
        """
        job = self._jobs.get(job_id)
        if job is None:
            logger.debug(f"mark_failed ignored: job {job_id} not in queue")
            return False

        job.error = message
        self._set_status(job, JobStatus.FAILED)
        self._sync_ready()
        return True

    def remove_job(self, job_id: str) -> bool:
        """
        Remove a job from the queue (used to clear failed jobs).

        A processing job cannot be removed: in-flight work is never cancelled.

        Returns:
            True if the job was removed
        """
        job = self._jobs.get(job_id)
        if job is None:
            return False
        if job.status == JobStatus.PROCESSING:
            logger.warning(f"Refusing to remove job {job_id}: currently processing")
            return False

        del self._jobs[job_id]
        self._sync_ready()
        logger.info(f"Removed job {job_id} ({job.status.value})")
        return True

    def clear_failed(self) -> int:
        """Remove all failed jobs. Returns how many were removed."""
        failed = [j.job_id for j in self._jobs.values() if j.status == JobStatus.FAILED]
        for job_id in failed:
            del self._jobs[job_id]
        self._sync_ready()
        if failed:
            logger.info(f"Cleared {len(failed)} failed job(s)")
        return len(failed)

    async def wait_for_pending(self, timeout: float) -> bool:
        """
        Wait until a pending job may be available.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            True if woken by the ready signal, False on timeout
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    def _set_status(self, job: Job, status: JobStatus) -> None:
        previous = job.status
        job.status = status
        job.updated_at = datetime.now(timezone.utc)
        logger.info(f"Job {job.job_id}: {previous.value} -> {status.value}")

    def _sync_ready(self) -> None:
        # The ready signal stays set only while pending work exists
        if self.has_pending():
            self._ready.set()
        else:
            self._ready.clear()


def generate_job_id() -> str:
    """
    Generate a unique job ID.

    Returns:
        12-character hex string (UUID4 truncated)
    """
    return uuid4().hex[:12]
