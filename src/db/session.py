"""
Engine and session lifecycle for the Threadline store.

One `Database` per process owns the async engine. Requests borrow an
`AsyncSession` through `get_db`; scripts and tests use `Database.session()`
directly.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
import logging

from ..config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owner of the async engine and session factory.

    Example:
        database = Database("sqlite+aiosqlite:///./threadline.db")
        await database.initialize()
        async with database.session() as session:
            user = await UserRepository(session).create("Alice")
        await database.close()
    """

    def __init__(self, connection_string: Optional[str] = None):
        # None means "use settings.db.connection_string at initialize time"
        self.connection_string = connection_string
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Build the engine: NullPool plus FK pragma on SQLite, a sized pool on PostgreSQL."""
        if self._initialized:
            logger.warning("Database already initialized")
            return

        url = self.connection_string or settings.db.connection_string
        is_sqlite = url.startswith("sqlite")

        if is_sqlite:
            pool_kwargs = {"poolclass": NullPool}
        else:
            pool_kwargs = {
                "pool_size": settings.db.pool_size,
                "max_overflow": settings.db.max_overflow,
                "pool_timeout": settings.db.pool_timeout,
                "pool_recycle": settings.db.pool_recycle,
                "pool_pre_ping": True,
            }

        self.engine = create_async_engine(
            url,
            echo=settings.db.echo,
            echo_pool=settings.db.echo_pool,
            **pool_kwargs
        )
        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # models are read after the dispatch layer commits
            autoflush=False,
        )

        self._initialized = True
        logger.info(f"Database ready ({url.split('://')[0]}, {pool_kwargs.get('pool_size', 'no pool')})")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits whatever is still pending on exit.

        Any exception rolls the session back and propagates.
        """
        if not self._initialized or not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.session_factory()
        try:
            yield session
            if session.in_transaction():
                await session.commit()
        except Exception as e:
            logger.error(f"Rolling back session: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create users/messages with metadata.create_all (dev and tests; Alembic elsewhere)."""
        if not self._initialized or not self.engine:
            raise RuntimeError("Database not initialized")

        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info(f"Tables ensured: {', '.join(sorted(Base.metadata.tables))}")

    async def close(self) -> None:
        if not self._initialized:
            return

        if self.engine:
            await self.engine.dispose()
            self.engine = None

        self.session_factory = None
        self._initialized = False
        logger.info("Database engine disposed")


db = Database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    if not db.initialized:
        await db.initialize()
    async with db.session() as session:
        yield session
