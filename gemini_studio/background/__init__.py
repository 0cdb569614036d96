"""
Background job processing system.

Exports:
    - QueueProcessor: Single-flight generation job processor
    - setup_signal_handlers: Graceful shutdown signal handling
    - ServerLifecycle: Startup and shutdown coordination
"""

from gemini_studio.background.lifecycle import ServerLifecycle
from gemini_studio.background.signals import setup_signal_handlers
from gemini_studio.background.worker import QueueProcessor

__all__ = ["QueueProcessor", "setup_signal_handlers", "ServerLifecycle"]
