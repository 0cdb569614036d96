"""Configuration system for gemini-studio."""

from .loader import get_config_path, get_db_path, load_config
from .schema import (
    GeminiConfig,
    OutputConfig,
    QueueConfig,
    StorageConfig,
    StudioConfig,
)

__all__ = [
    "StudioConfig",
    "GeminiConfig",
    "QueueConfig",
    "StorageConfig",
    "OutputConfig",
    "load_config",
    "get_config_path",
    "get_db_path",
]
