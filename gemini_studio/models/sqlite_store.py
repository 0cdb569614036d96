# gemini_studio/models/sqlite_store.py
"""
SQLite-backed slot persistence.

Provides async get/set with WAL mode and IMMEDIATE transactions so a
crash mid-write never leaves a half-written gallery behind.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from gemini_studio.models.schema import init_db
from gemini_studio.models.store import KeyValueStore

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """
    Async SQLite-backed key-value storage.

    Each call opens its own connection; writes take the database lock up
    front (BEGIN IMMEDIATE) so concurrent gallery saves serialize cleanly.
    """

    def __init__(self, db_path: str) -> None:
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = db_path
        logger.info(f"Created SQLiteKeyValueStore with path: {db_path}")

    @property
    def db_path(self) -> str:
        return self._db_path

    async def initialize(self) -> None:
        """Create the parent directory and initialize the schema."""
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        await init_db(self._db_path)

    async def get(self, key: str) -> str | None:
        """
        Read a slot.

        Args:
            key: Slot name

        Returns:
            Stored value, or None if absent
        """
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        """
        Write a slot, replacing any previous value.

        Args:
            key: Slot name
            value: Serialized payload
        """
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")

            try:
                await db.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now(timezone.utc).isoformat()),
                )
                await db.commit()
                logger.debug(f"Wrote slot '{key}' ({len(value)} bytes)")

            except Exception:
                await db.rollback()
                raise

    async def close(self) -> None:
        """Fold the WAL back into the main file so the gallery lives in one file at rest."""
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except aiosqlite.Error as e:
            logger.warning(f"Could not checkpoint {self._db_path}: {e}")
            return
        logger.debug(f"Checkpointed {self._db_path}")
