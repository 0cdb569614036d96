# gemini_studio/background/lifecycle.py
"""
Server lifecycle management.

Coordinates startup (storage initialization + gallery load + processor)
and shutdown.
"""

import logging

from gemini_studio.background.signals import setup_signal_handlers
from gemini_studio.background.worker import QueueProcessor
from gemini_studio.config.schema import StudioConfig
from gemini_studio.models.store import KeyValueStore
from gemini_studio.provider.base import ImageProvider
from gemini_studio.session import StudioSession

logger = logging.getLogger(__name__)


class ServerLifecycle:
    """
    Server lifecycle coordinator.

    Manages:
        - Storage initialization and gallery load on startup
        - Queue processor lifecycle
        - Signal handler registration
        - Graceful shutdown
    """

    def __init__(
        self,
        store: KeyValueStore,
        provider: ImageProvider,
        config: StudioConfig | None = None,
    ) -> None:
        """
        Initialize server lifecycle manager.

        Args:
            store: Persistence adapter for the gallery
            provider: Image provider shared by generation and upscaling
            config: Optional StudioConfig (defaults used if None)
        """
        config = config or StudioConfig()
        self._config = config
        self._store = store
        self._session = StudioSession(
            provider, store=store, gallery_key=config.storage.gallery_key
        )
        self._processor = QueueProcessor(
            self._session.queue,
            self._session.gallery,
            provider,
            poll_interval=config.queue.poll_interval,
        )
        self._session.processor = self._processor
        self._started = False
        logger.info("Created ServerLifecycle")

    @property
    def session(self) -> StudioSession:
        """Get the session (for server.py to pass to tools)."""
        return self._session

    @property
    def processor(self) -> QueueProcessor:
        """Get the queue processor (for inspection/testing)."""
        return self._processor

    @property
    def config(self) -> StudioConfig:
        return self._config

    async def startup(self, install_signal_handlers: bool = True) -> None:
        """
        Start the server lifecycle.

        Steps:
            1. Initialize storage
            2. Load the persisted gallery (non-fatal on failure)
            3. Register signal handlers for graceful shutdown
            4. Start the queue processor
        """
        logger.info("Starting server lifecycle...")

        try:
            await self._store.initialize()
        except Exception as e:
            # Gallery falls back to memory-only; writes will log their own failures
            logger.error(f"Storage initialization failed, continuing in memory: {e}")

        await self._session.load()

        if install_signal_handlers:
            setup_signal_handlers(self.shutdown)

        await self._processor.start()
        self._started = True

        logger.info("Server lifecycle started: processor running")

    async def shutdown(self, timeout: float | None = None) -> None:
        """
        Shut down the server lifecycle gracefully.

        Steps:
            1. Stop queue processor (in-flight job finishes unless timeout expires)
            2. Close the provider's HTTP client
            3. Close storage (WAL checkpoint)

        Args:
            timeout: Max seconds to wait for an in-flight job
        """
        if not self._started:
            return
        self._started = False

        logger.info("Shutting down server lifecycle...")

        await self._processor.stop(timeout=timeout)
        await self._session.provider.aclose()
        await self._store.close()

        logger.info("Server lifecycle shutdown complete")
