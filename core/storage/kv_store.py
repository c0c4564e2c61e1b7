"""
SQLiteKeyValueStore - key-value string store

Implements IKeyValueStore on the kv_store table.
"""

import logging
from datetime import datetime, timezone

from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """Key-value store on SQLite

    Reads and writes the kv_store table. Errors from aiosqlite propagate.

    Args:
        db: connected SQLiteAdapter (schema initialized)

    Usage:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        store = SQLiteKeyValueStore(db)

        await store.set("key", "value")
        value = await store.get("key")
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get(self, key: str) -> str | None:
        """Read a value

        Args:
            key: storage key

        Returns:
            stored string or None
        """
        row = await self.db.fetchone(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        )
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        """Write a value (UPSERT), committed before returning

        Args:
            key: storage key
            value: string to store
        """
        now = datetime.now(timezone.utc).isoformat()

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now),
            )

        logger.debug(f"kv_store set: {key} ({len(value)} chars)")

    async def delete(self, key: str) -> None:
        """Remove a key"""
        async with self.db.transaction():
            await self.db.execute("DELETE FROM kv_store WHERE key = ?", (key,))

        logger.debug(f"kv_store delete: {key}")
