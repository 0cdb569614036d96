# gemini_studio/tools/list_queue.py
"""
list_queue and remove_job tool implementations.

Lists queued jobs with their status, and clears failed jobs.
"""

import logging

from fastmcp.exceptions import ToolError

from gemini_studio.models.jobs import JobStatus
from gemini_studio.models.responses import JobSummary, QueueResponse, RemoveJobResponse
from gemini_studio.session import StudioSession
from gemini_studio.validation.sanitize import sanitize_job_id

logger = logging.getLogger(__name__)


def list_queue(session: StudioSession) -> dict:
    """
    List all jobs in the queue.

    Completed jobs have already moved to the gallery, so only pending,
    processing, and failed jobs appear.

    Returns:
        QueueResponse as dict
    """
    summaries = []
    pending = 0
    for job in session.jobs:
        prompt = job.prompt
        if len(prompt) > 80:
            prompt = prompt[:77] + "..."
        if job.status == JobStatus.PENDING:
            pending += 1

        summaries.append(
            JobSummary(
                job_id=job.job_id,
                prompt=prompt,
                aspect_ratio=job.aspect_ratio.value,
                status=job.status.value,
                reference_images=len(job.reference_images),
                error=job.error,
                created_at=job.created_at.isoformat(),
            )
        )

    response = QueueResponse(
        jobs=summaries,
        total=len(summaries),
        pending=pending,
        is_processing=session.is_processing,
    )
    return response.model_dump()


def remove_job(job_id: str, session: StudioSession) -> dict:
    """
    Remove a job from the queue.

    Pending and failed jobs can be removed. A processing job cannot.

    Raises:
        ToolError: If job_id is invalid or not found
    """
    sanitized_id = sanitize_job_id(job_id)

    job = session.queue.get(sanitized_id)
    if job is None:
        raise ToolError(
            f"Job '{sanitized_id}' not found. Use list_queue to see queued jobs."
        )

    removed = session.on_remove_job(sanitized_id)
    if removed:
        message = f"Removed {job.status.value} job."
    else:
        message = "Job is processing and cannot be removed until it finishes."

    return RemoveJobResponse(
        job_id=sanitized_id, removed=removed, message=message
    ).model_dump()
