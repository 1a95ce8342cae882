"""
Local Key-Value Store - device-persistent get/set storage

Entries consumed/produced by the inventory core:
- authToken: bearer token for the remote API
- selectedHouseId / selectedHouseName: the "current" House
- kitchen_<houseId>: resolved kitchen (container) id for that House

Simple get/set semantics, no transactions or locking: a device has a single
active user session.
"""
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

import structlog
from sqlalchemy import text

from pantrykit.common.database import DatabaseSessionManager

logger = structlog.get_logger()


class StorageKeys:
    """Key names shared with the rest of the app"""
    AUTH_TOKEN = "authToken"
    SELECTED_HOUSE_ID = "selectedHouseId"
    SELECTED_HOUSE_NAME = "selectedHouseName"

    @staticmethod
    def kitchen_for_house(house_id: str) -> str:
        return f"kitchen_{house_id}"


class KeyValueStore(Protocol):
    """Protocol for the local persistent key-value store."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class SqlKeyValueStore:
    """
    Key-value store persisted in a local sqlite database.

    Usage:
        store = SqlKeyValueStore(sessionmanager)
        await store.set(StorageKeys.AUTH_TOKEN, token)
        token = await store.get(StorageKeys.AUTH_TOKEN)
    """

    def __init__(self, sessionmanager: DatabaseSessionManager):
        self.sessionmanager = sessionmanager

    async def get(self, key: str) -> Optional[str]:
        query = text("SELECT value FROM local_kv WHERE key = :key")

        async with self.sessionmanager.session() as db:
            result = await db.execute(query, {"key": key})
            row = result.fetchone()

        if row is None:
            logger.debug("local_store_miss", key=key)
            return None
        return row.value

    async def set(self, key: str, value: str) -> None:
        query = text("""
            INSERT INTO local_kv (key, value, updated_at)
            VALUES (:key, :value, :updated_at)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """)

        async with self.sessionmanager.session() as db:
            await db.execute(query, {
                "key": key,
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })

        logger.debug("local_store_set", key=key)

    async def delete(self, key: str) -> None:
        query = text("DELETE FROM local_kv WHERE key = :key")

        async with self.sessionmanager.session() as db:
            await db.execute(query, {"key": key})

        logger.debug("local_store_delete", key=key)


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)
