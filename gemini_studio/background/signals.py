# gemini_studio/background/signals.py
"""
SIGINT/SIGTERM wiring for the MCP server process.

A signal schedules one lifecycle shutdown on the running loop; repeated
signals while that shutdown is in progress are ignored.
"""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def setup_signal_handlers(shutdown: Callable[[], Awaitable[None]]) -> list[str]:
    """
    Route termination signals to an async shutdown callback.

    Uses loop.add_signal_handler where the event loop supports it and falls
    back to signal.signal() otherwise (Windows ProactorEventLoop).

    Args:
        shutdown: Coroutine function that drains the processor and closes storage

    Returns:
        Names of the signals that were hooked
    """
    loop = asyncio.get_running_loop()
    pending: list[asyncio.Task] = []

    def _trigger(sig: signal.Signals) -> None:
        if pending and not pending[0].done():
            logger.warning(f"{sig.name} received again, shutdown already in progress")
            return
        logger.info(f"{sig.name} received, stopping queue processor")
        pending[:] = [loop.create_task(shutdown())]

    hooked = []
    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _trigger, sig)
        except NotImplementedError:
            signal.signal(
                sig,
                lambda num, _frame: loop.call_soon_threadsafe(_trigger, signal.Signals(num)),
            )
        hooked.append(sig.name)

    logger.info(f"Shutdown hooked to {', '.join(hooked)}")
    return hooked
