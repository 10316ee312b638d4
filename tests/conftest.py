"""Shared fixtures: throwaway SQLite databases behind the real connection manager."""

import pytest

from roybot.db.chat_log import ChatLogStore
from roybot.db.session import ConnectionManager


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'roy.db'}"


@pytest.fixture
def chat_log_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'chat_log.db'}"


@pytest.fixture
async def manager(database_url):
    manager = ConnectionManager(database_url, pool_size=5, acquire_timeout=5, query_timeout=5)
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
async def chat_log(chat_log_url):
    store = ChatLogStore(chat_log_url, acquire_timeout=5)
    await store.create_all()
    yield store
    await store.dispose()


@pytest.fixture
def count_chat_messages(chat_log):
    from sqlalchemy import func, select

    from roybot.models.chat_log import ChatMessage

    async def count() -> int:
        async with chat_log.engine.connect() as conn:
            stmt = select(func.count()).select_from(ChatMessage.__table__)
            return (await conn.execute(stmt)).scalar_one()

    return count
