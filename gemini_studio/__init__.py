"""gemini-studio: queued Gemini image generation with a persisted gallery."""

__version__ = "0.1.0"
