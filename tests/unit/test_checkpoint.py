"""
Unit tests for the cache stores and checkpoint management
"""

import pytest
from datetime import timedelta
from sqlalchemy import select, update
from ingestion.cache import DatabaseCache, MemoryCache
from ingestion.checkpoint import CheckpointManager
from models.cache_entry import CacheEntry
from models.product import utcnow


class TestMemoryCache:
    """Test in-process cache"""

    @pytest.mark.asyncio
    async def test_put_get_forget(self, fake_clock):
        cache = MemoryCache(clock=fake_clock)

        await cache.put("key", {"page": 3})
        assert await cache.get("key") == {"page": 3}
        assert await cache.has("key") is True

        await cache.forget("key")
        assert await cache.get("key") is None
        assert await cache.get("key", "fallback") == "fallback"

    @pytest.mark.asyncio
    async def test_entries_expire(self, fake_clock):
        cache = MemoryCache(clock=fake_clock)
        await cache.put("key", 1, ttl_seconds=10)

        fake_clock.advance(9)
        assert await cache.get("key") == 1

        fake_clock.advance(1)
        assert await cache.get("key") is None

    @pytest.mark.asyncio
    async def test_flush(self, fake_clock):
        cache = MemoryCache(clock=fake_clock)
        await cache.put("a", 1)
        await cache.put("b", 2)

        cache.flush()

        assert await cache.has("a") is False
        assert await cache.has("b") is False


class TestDatabaseCache:
    """Test cache backed by the cache_entries table"""

    @pytest.mark.asyncio
    async def test_put_overwrites_existing_key(self, db_session):
        cache = DatabaseCache(db_session)

        await cache.put("key", [1.5, 2.5], ttl_seconds=60)
        await cache.put("key", [3.5], ttl_seconds=60)

        assert await cache.get("key") == [3.5]
        result = await db_session.execute(select(CacheEntry).where(CacheEntry.key == "key"))
        assert len(result.scalars().all()) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_absent(self, db_session):
        cache = DatabaseCache(db_session)
        await cache.put("key", 5, ttl_seconds=60)

        await db_session.execute(
            update(CacheEntry)
            .where(CacheEntry.key == "key")
            .values(expires_at=utcnow() - timedelta(seconds=1))
        )
        await db_session.commit()

        assert await cache.get("key") is None
        assert await cache.purge_expired() == 1

    @pytest.mark.asyncio
    async def test_forget(self, db_session):
        cache = DatabaseCache(db_session)
        await cache.put("key", 5)

        await cache.forget("key")

        assert await cache.has("key") is False

    @pytest.mark.asyncio
    async def test_survives_new_session(self, session_factory):
        """Test entries are committed and visible to a later run"""
        async with session_factory() as session:
            await DatabaseCache(session).put("key", 7, ttl_seconds=60)

        async with session_factory() as session:
            assert await DatabaseCache(session).get("key") == 7


class TestCheckpointManager:
    """Test next-page checkpoint lifecycle"""

    @pytest.mark.asyncio
    async def test_round_trip(self, fake_clock):
        checkpoints = CheckpointManager(MemoryCache(clock=fake_clock), "import_checkpoint")

        assert await checkpoints.get() is None
        assert await checkpoints.has_checkpoint() is False

        await checkpoints.save(4)
        assert await checkpoints.get() == 4
        assert await checkpoints.has_checkpoint() is True

        await checkpoints.clear()
        assert await checkpoints.get() is None

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, fake_clock):
        checkpoints = CheckpointManager(MemoryCache(clock=fake_clock), "import_checkpoint", ttl_hours=24)
        await checkpoints.save(2)

        fake_clock.advance(24 * 3600)

        assert await checkpoints.get() is None

    @pytest.mark.asyncio
    async def test_keys_are_isolated(self, fake_clock):
        cache = MemoryCache(clock=fake_clock)
        first = CheckpointManager(cache, "first")
        second = CheckpointManager(cache, "second")

        await first.save(3)

        assert await second.get() is None

    @pytest.mark.asyncio
    async def test_database_backed_round_trip(self, db_session):
        checkpoints = CheckpointManager(DatabaseCache(db_session), "import_checkpoint")

        await checkpoints.save(9)

        assert await checkpoints.get() == 9
