"""
Key-value cache with expiry backing the checkpoint and the rate-limit window.

Two implementations share the ``CacheStore`` contract:
- ``DatabaseCache`` persists entries in the ``cache_entries`` table so the
  checkpoint and the request window survive process restarts
- ``MemoryCache`` keeps entries in-process (tests, dry experiments)

Keys act as namespaces: importer instances using different keys do not
see each other's state.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import upsert_insert
from models.cache_entry import CacheEntry
import logging
import time

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Minimal async get/put/forget cache"""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if absent or expired"""

    @abstractmethod
    async def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store ``value``; ``ttl_seconds=None`` never expires"""

    @abstractmethod
    async def forget(self, key: str) -> None:
        """Delete the entry if present"""

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None


class MemoryCache(CacheStore):
    """In-process cache; expiry is evaluated against ``clock``"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default

        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return default

        return value

    async def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        self._entries[key] = (value, expires_at)

    async def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def flush(self) -> None:
        self._entries.clear()


class DatabaseCache(CacheStore):
    """
    Cache stored in the ``cache_entries`` table.

    Every write commits immediately so the state is durable even if the
    run is killed before the next page.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, key: str, default: Any = None) -> Any:
        result = await self.db.execute(
            select(CacheEntry.value, CacheEntry.expires_at).where(CacheEntry.key == key)
        )
        row = result.first()

        if row is None:
            return default
        if row.expires_at is not None and row.expires_at <= _utcnow():
            return default

        return row.value

    async def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        now = _utcnow()
        expires_at = now + timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None

        insert = upsert_insert(self.db)
        stmt = insert(CacheEntry).values(
            key=key,
            value=value,
            expires_at=expires_at,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={
                "value": stmt.excluded.value,
                "expires_at": stmt.excluded.expires_at,
                "updated_at": stmt.excluded.updated_at,
            }
        )

        await self.db.execute(stmt)
        await self.db.commit()

    async def forget(self, key: str) -> None:
        await self.db.execute(delete(CacheEntry).where(CacheEntry.key == key))
        await self.db.commit()

    async def purge_expired(self) -> int:
        """Delete expired entries, returning how many were removed"""
        result = await self.db.execute(
            delete(CacheEntry).where(CacheEntry.expires_at <= _utcnow())
        )
        await self.db.commit()

        logger.debug(f"Purged {result.rowcount} expired cache entries")
        return result.rowcount


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
