"""
Data models for gemini-studio.

Provides Pydantic response models, the job queue, the gallery store,
and reference image staging.
"""

from gemini_studio.models.gallery import GalleryItem, GalleryStore, generate_item_id
from gemini_studio.models.jobs import (
    AspectRatio,
    Job,
    JobQueue,
    JobStatus,
    generate_job_id,
)
from gemini_studio.models.responses import (
    DownloadResponse,
    EnqueueJobResponse,
    GalleryResponse,
    GallerySummary,
    ImageDetailResponse,
    JobSummary,
    QueueResponse,
    RemoveJobResponse,
    StagingResponse,
)
from gemini_studio.models.staging import MAX_REFERENCE_IMAGES, ReferenceImageStaging
from gemini_studio.models.store import InMemoryKeyValueStore, KeyValueStore

__all__ = [
    # Response models
    "StagingResponse",
    "EnqueueJobResponse",
    "JobSummary",
    "QueueResponse",
    "RemoveJobResponse",
    "GallerySummary",
    "GalleryResponse",
    "ImageDetailResponse",
    "DownloadResponse",
    # Job tracking
    "AspectRatio",
    "JobStatus",
    "Job",
    "JobQueue",
    "generate_job_id",
    # Gallery
    "GalleryItem",
    "GalleryStore",
    "generate_item_id",
    # Staging
    "MAX_REFERENCE_IMAGES",
    "ReferenceImageStaging",
    # Persistence
    "KeyValueStore",
    "InMemoryKeyValueStore",
]
