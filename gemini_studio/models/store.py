# gemini_studio/models/store.py
"""
Key-value store protocol definition.

Defines the abstract interface the gallery persists through, plus the
in-memory implementation used for tests and ephemeral sessions.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Abstract base class for durable named slots.

    Both in-memory and persistent (SQLite) stores implement this protocol.
    """

    async def initialize(self) -> None:
        """Prepare the backing storage (no-op by default)."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Read a slot.

        Args:
            key: Slot name

        Returns:
            Stored value, or None if the slot was never written
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Write a slot, replacing any previous value.

        Args:
            key: Slot name
            value: Serialized payload
        """
        pass

    async def close(self) -> None:
        """Release resources (no-op by default)."""


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})
        logger.info("Initialized InMemoryKeyValueStore")

    async def get(self, key: str) -> str | None:
        return self._slots.get(key)

    async def set(self, key: str, value: str) -> None:
        self._slots[key] = value
