import asyncio
import logging
from typing import Optional

from smarthr.core.database import Database
from smarthr.core.logging_config import setup_logging
from smarthr.models.base import Base
import smarthr.models  # noqa: F401  registers every table on Base.metadata
from smarthr.db.seeds.initial_data import create_initial_data

logger = logging.getLogger(__name__)

async def create_tables(db: Database):
    """Create all database tables"""
    try:
        async with db.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        raise

async def init_db(url: Optional[str] = None, seed: bool = True):
    """Create tables and load the initial data set"""
    db = Database(url)
    db.connect()
    try:
        await create_tables(db)
        if seed:
            async for session in db.session():
                await create_initial_data(session)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    finally:
        await db.disconnect()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_db())
