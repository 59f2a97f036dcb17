# smarthr/core/database.py
import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from smarthr.core.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the process-wide engine and session factory"""

    def __init__(self, url: Optional[str] = None, **engine_options):
        self.url = url or settings.database_url
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def connect(self) -> None:
        if self.engine is not None:
            raise RuntimeError("Database is already connected")

        options = dict(echo=settings.DB_ECHO, future=True, pool_pre_ping=True)
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )
        options.update(self.engine_options)

        self.engine = create_async_engine(self.url, **options)
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database engine created for {self.engine.url.render_as_string(hide_password=True)}")

    async def disconnect(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.session_maker = None
        logger.info("Database engine disposed")

    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.session_maker is None:
            raise RuntimeError("Database is not connected")
        async with self.session_maker() as session:
            yield session


async def get_async_session(request: Request) -> AsyncIterator[AsyncSession]:
    db: Database = request.app.state.db
    async for session in db.session():
        yield session
