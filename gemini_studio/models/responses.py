# gemini_studio/models/responses.py
"""
Pydantic response models for MCP tool outputs.

All tools return structured responses using these models for consistency.
"""

from pydantic import BaseModel, Field


class StagingResponse(BaseModel):
    """Response from the reference image staging tools."""

    staged_count: int = Field(description="Number of images currently staged (0-4)")
    accepted: int = Field(default=0, description="Images accepted by this call")
    dropped: int = Field(default=0, description="Images dropped because staging was full")
    remaining: int = Field(description="Free staging slots")


class EnqueueJobResponse(BaseModel):
    """Response from enqueue_job tool."""

    job_id: str = Field(description="Unique job identifier for tracking")
    status: str = Field(description="Job status (always 'pending' for new jobs)")
    position: int = Field(description="1-based position among pending jobs")
    aspect_ratio: str = Field(description="Requested aspect ratio")
    reference_images: int = Field(description="Reference images captured from staging")
    warnings: list[str] = Field(
        default_factory=list, description="Provider limitations that affect this job"
    )
    next_steps: str = Field(
        description="Instructions for monitoring job progress",
        default="Use list_queue to monitor progress and list_gallery for results",
    )


class JobSummary(BaseModel):
    """Summary information for a single queued job."""

    job_id: str = Field(description="Job identifier")
    prompt: str = Field(description="Prompt (truncated to 80 chars)")
    aspect_ratio: str = Field(description="Requested aspect ratio")
    status: str = Field(description="pending/processing/failed")
    reference_images: int = Field(description="Number of reference images")
    error: str | None = Field(default=None, description="Error message if job failed")
    created_at: str = Field(description="Creation timestamp (ISO format)")


class QueueResponse(BaseModel):
    """Response from list_queue tool."""

    jobs: list[JobSummary] = Field(
        default_factory=list, description="Jobs in submission order"
    )
    total: int = Field(description="Total number of jobs in the queue")
    pending: int = Field(description="Number of jobs waiting to run")
    is_processing: bool = Field(description="Whether a generation is in flight")


class RemoveJobResponse(BaseModel):
    """Response from remove_job tool."""

    job_id: str = Field(description="Job identifier")
    removed: bool = Field(description="Whether the job was removed")
    message: str = Field(description="Human-readable outcome")


class GallerySummary(BaseModel):
    """Summary of one gallery item (image payload omitted)."""

    item_id: str = Field(description="Gallery item identifier")
    prompt: str = Field(description="Originating prompt")
    mime_type: str = Field(description="Image MIME type")
    size_bytes: int = Field(description="Decoded image size in bytes")


class GalleryResponse(BaseModel):
    """Response from list_gallery tool."""

    items: list[GallerySummary] = Field(
        default_factory=list, description="Gallery items, newest first"
    )
    total: int = Field(description="Total number of gallery items")


class ImageDetailResponse(BaseModel):
    """Response from select_image and upscale_image tools."""

    item_id: str = Field(description="Gallery item identifier")
    prompt: str = Field(description="Originating prompt")
    mime_type: str = Field(description="Image MIME type")
    size_bytes: int = Field(description="Decoded image size in bytes")
    src: str | None = Field(default=None, description="Image data URL if requested")
    message: str | None = Field(default=None, description="Human-readable outcome")


class DownloadResponse(BaseModel):
    """Response from download_image tool."""

    item_id: str = Field(description="Gallery item identifier")
    file_path: str = Field(description="Path the image was written to")
    size_bytes: int = Field(description="Bytes written")
