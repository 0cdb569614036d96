# gemini_studio/models/schema.py
"""
SQLite layout for slot persistence.

One table of named slots. The layout version lives in PRAGMA user_version
so a future layout can be migrated in place.
"""

import logging

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

KV_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA busy_timeout=5000",
)


async def init_db(db_path: str) -> None:
    """
    Create the slot table and stamp the layout version.

    Args:
        db_path: Path to SQLite database file

    Raises:
        RuntimeError: If the file was written by a newer layout version
    """
    async with aiosqlite.connect(db_path) as db:
        for pragma in _CONNECTION_PRAGMAS:
            await db.execute(pragma)

        cursor = await db.execute("PRAGMA user_version")
        found = (await cursor.fetchone())[0]
        if found > SCHEMA_VERSION:
            raise RuntimeError(
                f"{db_path} uses storage layout v{found}; this build supports v{SCHEMA_VERSION}"
            )

        await db.execute(KV_TABLE_SQL)
        if found < SCHEMA_VERSION:
            await db.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            logger.info(f"Stamped {db_path} with storage layout v{SCHEMA_VERSION}")
        await db.commit()

    logger.debug(f"Slot storage ready at {db_path}")
