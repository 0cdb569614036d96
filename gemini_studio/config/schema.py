# gemini_studio/config/schema.py
"""
Pydantic configuration models for gemini-studio.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GeminiConfig(BaseModel):
    """Gemini image API configuration."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(
        default=None,
        description="Gemini API key (None = read GEMINI_API_KEY / API_KEY from env)",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative Language API base URL",
    )
    image_model: str = Field(
        default="imagen-4.0-generate-001",
        description="Text-to-image model (used when no reference images are given)",
    )
    multimodal_model: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Image-conditioned model (reference images and upscaling)",
    )
    timeout: int = Field(default=120, ge=1, description="Request timeout in seconds")
    max_reference_images: int | None = Field(
        default=1,
        ge=1,
        description="Reference images sent to the multimodal model (None = all)",
    )


class QueueConfig(BaseModel):
    """Generation queue configuration."""

    model_config = ConfigDict(extra="ignore")

    poll_interval: float = Field(
        default=1.0,
        gt=0.0,
        description="Seconds between queue checks when no enqueue signal arrives",
    )
    max_prompt_length: int = Field(
        default=5000, ge=1, description="Prompts longer than this are truncated"
    )


class StorageConfig(BaseModel):
    """Gallery persistence configuration."""

    model_config = ConfigDict(extra="ignore")

    db_path: str | None = Field(
        default=None,
        description="SQLite database path (None = platform config directory)",
    )
    gallery_key: str = Field(
        default="gemini-studio-gallery",
        description="Storage slot holding the serialized gallery",
    )


class OutputConfig(BaseModel):
    """Output and file path configuration."""

    model_config = ConfigDict(extra="ignore")

    downloads_dir: str = Field(
        default=".gemini-studio/downloads",
        description="Directory for downloaded images (relative to working directory)",
    )
    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )


class StudioConfig(BaseModel):
    """Root configuration for gemini-studio."""

    model_config = ConfigDict(extra="ignore")

    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
