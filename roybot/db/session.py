import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from roybot.core.config import Settings
from roybot.db.base import Base
from roybot.db.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, pool_size: int, acquire_timeout: Optional[float]) -> AsyncEngine:
    """
    Create an async engine whose pool never holds more than `pool_size` connections.

    SQLite gets foreign keys switched on so ON DELETE CASCADE behaves as on MySQL.
    """
    engine = create_async_engine(
        url,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=acquire_timeout if acquire_timeout is not None else 30,
        pool_pre_ping=True,
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class ConnectionManager:
    """
    Bounded pool of database connections shared by all repositories.

    At most `pool_size` connections are checked out at once. Extra callers wait
    for a free slot; when `queue_limit` is non-zero and that many callers are
    already waiting, the next one is rejected with DatabaseConnectionError.
    A queue limit of 0 never rejects.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        queue_limit: int = 0,
        acquire_timeout: Optional[float] = 30.0,
        query_timeout: Optional[float] = 30.0,
    ):
        if pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        if queue_limit < 0:
            raise ValueError("queue_limit must be 0 (unbounded) or positive")

        self.pool_size = pool_size
        self.queue_limit = queue_limit
        self.acquire_timeout = acquire_timeout
        self.query_timeout = query_timeout
        self.engine = build_engine(url, pool_size, acquire_timeout)

        self._slots = asyncio.Semaphore(pool_size)
        self._waiting = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionManager":
        return cls(
            settings.database_url,
            pool_size=settings.DB_POOL_SIZE,
            queue_limit=settings.DB_QUEUE_LIMIT,
            acquire_timeout=settings.DB_ACQUIRE_TIMEOUT,
            query_timeout=settings.DB_QUERY_TIMEOUT,
        )

    @property
    def waiting(self) -> int:
        return self._waiting

    async def _take_slot(self) -> None:
        if not self._slots.locked():
            await self._slots.acquire()
            return

        if self.queue_limit and self._waiting >= self.queue_limit:
            logger.warning(f"Connection queue full ({self._waiting} waiting), rejecting caller")
            raise DatabaseConnectionError("Connection pool exhausted")

        self._waiting += 1
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out after {self.acquire_timeout}s waiting for a connection")
            raise DatabaseConnectionError("Timed out waiting for a database connection")
        finally:
            self._waiting -= 1

    async def acquire(self) -> AsyncConnection:
        """Check out a connection. Every successful acquire must be paired with release()."""
        await self._take_slot()
        try:
            return await self.engine.connect()
        except (SQLAlchemyError, OSError) as e:
            self._slots.release()
            logger.error(f"Could not connect to database: {e}")
            raise DatabaseConnectionError("Could not connect to database", cause=e)
        except BaseException:
            self._slots.release()
            raise

    async def release(self, connection: AsyncConnection) -> None:
        try:
            await connection.close()
        finally:
            self._slots.release()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def health_check(self) -> bool:
        """Round-trip a trivial query. Never raises; failures are logged."""
        try:
            async with self.connection() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    async def create_all(self) -> None:
        # Registers the tables on Base.metadata
        import roybot.models.users  # noqa: F401
        import roybot.models.conversations  # noqa: F401
        import roybot.models.exercises  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
