import asyncio
import logging
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from roybot.core.config import Settings
from roybot.db.base import ChatLogBase, utcnow
from roybot.db.exceptions import DatabaseError
from roybot.db.result import Result
from roybot.db.session import build_engine
from roybot.models.chat_log import ChatMessage
from roybot.schemas.chat import ChatMessageRead

logger = logging.getLogger(__name__)


class ChatLogStore:
    """
    Append-only log of raw chat messages.

    Runs on its own engine and metadata and knows nothing about users or
    conversations. There are no read, update or delete operations.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        acquire_timeout: Optional[float] = 30.0,
        query_timeout: Optional[float] = 30.0,
    ):
        self.engine = build_engine(url, pool_size, acquire_timeout)
        self.query_timeout = query_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatLogStore":
        return cls(
            settings.chat_log_url,
            acquire_timeout=settings.DB_ACQUIRE_TIMEOUT,
            query_timeout=settings.DB_QUERY_TIMEOUT,
        )

    async def _insert(self, message: str, created_at) -> int:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                insert(ChatMessage.__table__).values(message=message, created_at=created_at)
            )
        return result.inserted_primary_key[0]

    async def append(self, message: str) -> Result[ChatMessageRead]:
        created_at = utcnow()
        try:
            message_id = await asyncio.wait_for(self._insert(message, created_at), timeout=self.query_timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Saving chat message timed out after {self.query_timeout}s")
            return Result.fail(DatabaseError("Timed out saving chat message", cause=e))
        except SQLAlchemyError as e:
            logger.error(f"Error saving chat message: {e}")
            return Result.fail(DatabaseError("Could not save chat message", cause=e))

        return Result.ok(ChatMessageRead(id=message_id, message=message, created_at=created_at))

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(ChatLogBase.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
