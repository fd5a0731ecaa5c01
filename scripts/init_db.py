import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy.ext.asyncio import create_async_engine
from core.config import settings
from models.base import Base
# Import all models to ensure they are registered
from models.product import Product
from models.cache_entry import CacheEntry

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def init_database():
    logger.info("Connecting to database...")
    engine = create_async_engine(settings.DATABASE_URL, echo=settings.ENVIRONMENT == "development")

    async with engine.begin() as conn:
        logger.info(f"Creating tables: {Product.__tablename__}, {CacheEntry.__tablename__}")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created successfully.")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_database())
