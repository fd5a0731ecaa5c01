"""
Checkpoint management for resumable imports
"""

from typing import Optional
from ingestion.cache import CacheStore
import logging

logger = logging.getLogger(__name__)


class CheckpointManager:
    """
    Persist the next page to fetch.

    Lifecycle:
    - absent at cold start
    - overwritten after each fully processed page
    - cleared when a run completes or a run starts without resume
    - read once at start when resuming
    """

    def __init__(self, cache: CacheStore, cache_key: str, ttl_hours: int = 24):
        self.cache = cache
        self.cache_key = cache_key
        self.ttl_hours = ttl_hours

    async def save(self, page: int) -> None:
        await self.cache.put(self.cache_key, page, ttl_seconds=self.ttl_hours * 3600)
        logger.debug(f"Checkpoint saved: next page {page}")

    async def get(self) -> Optional[int]:
        page = await self.cache.get(self.cache_key)
        return int(page) if page is not None else None

    async def clear(self) -> None:
        await self.cache.forget(self.cache_key)
        logger.debug("Checkpoint cleared")

    async def has_checkpoint(self) -> bool:
        return await self.cache.has(self.cache_key)
