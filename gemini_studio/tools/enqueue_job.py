# gemini_studio/tools/enqueue_job.py
"""
enqueue_job tool implementation.

Validates inputs, captures staged reference images, and queues generation work.
"""

import logging

from fastmcp.exceptions import ToolError

from gemini_studio.config.schema import StudioConfig
from gemini_studio.models.jobs import JobStatus
from gemini_studio.models.responses import EnqueueJobResponse
from gemini_studio.session import StudioSession
from gemini_studio.validation.sanitize import sanitize_aspect_ratio, sanitize_prompt

logger = logging.getLogger(__name__)


def enqueue_job(
    prompt: str,
    aspect_ratio: str,
    session: StudioSession,
    config: StudioConfig,
) -> dict:
    """
    Queue an image generation job.

    The currently staged reference images are attached to the job and
    staging is cleared.

    Args:
        prompt: Text describing the desired image
        aspect_ratio: One of 1:1, 16:9, 9:16, 4:3, 3:4
        session: Studio session
        config: Configuration instance

    Returns:
        EnqueueJobResponse as dict

    Raises:
        ToolError: If prompt or aspect ratio is invalid
    """
    cleaned_prompt = sanitize_prompt(prompt, max_length=config.queue.max_prompt_length)
    ratio = sanitize_aspect_ratio(aspect_ratio)

    try:
        job = session.on_enqueue(cleaned_prompt, ratio)
    except ValueError as e:
        raise ToolError(f"Cannot enqueue job: {e}")

    warnings = []
    submitted = len((prompt or "").strip())
    if submitted > len(cleaned_prompt):
        warnings.append(
            f"Prompt truncated from {submitted} to {len(cleaned_prompt)} characters."
        )
    refs = len(job.reference_images)
    limit = session.provider.max_reference_images
    if refs and limit is not None and refs > limit:
        warnings.append(
            f"The image model honours {limit} reference image(s); "
            f"only the first {limit} of {refs} will be used."
        )
    if refs:
        warnings.append(
            "Reference images select the image-conditioned model, "
            f"which may ignore the requested aspect ratio ({ratio.value})."
        )

    pending = [j for j in session.jobs if j.status == JobStatus.PENDING]
    position = next(
        (i + 1 for i, j in enumerate(pending) if j.job_id == job.job_id), len(pending)
    )

    logger.info(f"Created generation job {job.job_id} at position {position}")

    response = EnqueueJobResponse(
        job_id=job.job_id,
        status=job.status.value,
        position=position,
        aspect_ratio=ratio.value,
        reference_images=refs,
        warnings=warnings,
    )
    return response.model_dump()
