import logging
import os
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Engine and session factory for one database URL.

    Constructed once at startup and handed to whatever needs a session
    (the app, the scheduler, tests). Nothing is created until ``init()``.
    """

    def __init__(self, database_url: str):
        # Convert sync sqlite URL to async
        if database_url.startswith("sqlite:///"):
            database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        self.database_url = database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None
        self._warned_not_ready = False

    @property
    def ready(self) -> bool:
        return self.session_maker is not None

    def warn_if_not_ready(self) -> bool:
        """Log once per Database that it is not set up. Returns True when not ready."""
        if self.ready:
            return False
        if not self._warned_not_ready:
            logger.warning("Database not configured, changes will not be saved")
            self._warned_not_ready = True
        return True

    async def init(self) -> None:
        url = self.database_url

        # Ensure database directory exists
        if url.startswith("sqlite+aiosqlite:///") and ":memory:" not in url:
            db_path = url.replace("sqlite+aiosqlite:///", "")
            db_dir = os.path.dirname(db_path)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)

        connect_args = {}
        kwargs = {}
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            kwargs["poolclass"] = StaticPool

        self.engine = create_async_engine(url, connect_args=connect_args, **kwargs)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Import models to register them with Base.metadata
        from pacer import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_maker = None

    def session(self) -> AsyncSession:
        return self.session_maker()


async def get_db(request: Request) -> AsyncGenerator[Optional[AsyncSession], None]:
    """Yield a session from the app's Database, or None when it is not set up."""
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None or database.warn_if_not_ready():
        yield None
        return
    async with database.session() as session:
        yield session
