from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from models.product import utcnow
from models.base import Base


class CacheEntry(Base):
    """
    Key-value entries with expiry, shared between importer runs.

    Purpose:
    - Checkpoint storage (next page to fetch)
    - Rate-limiter request window

    Design:
    - One row per key; writes are upserts on ``key``
    - ``expires_at`` NULL means no expiry
    """
    __tablename__ = "cache_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(255), nullable=False, unique=True)
    value = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    expires_at = Column(DateTime, nullable=True, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
