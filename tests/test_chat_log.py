import asyncio

import pytest

from roybot.db.base import utcnow
from roybot.db.chat_log import ChatLogStore
from roybot.db.exceptions import DatabaseError

pytestmark = pytest.mark.anyio


async def test_append_stores_message_with_timestamp(chat_log, count_chat_messages) -> None:
    started = utcnow()

    result = await chat_log.append("I can't sleep lately")

    assert result.success
    assert result.value.message == "I can't sleep lately"
    assert result.value.created_at >= started
    assert await count_chat_messages() == 1


async def test_appends_are_independent_rows(chat_log, count_chat_messages) -> None:
    first = (await chat_log.append("one")).unwrap()
    second = (await chat_log.append("two")).unwrap()

    assert second.id > first.id
    assert await count_chat_messages() == 2


async def test_append_failure_is_returned(chat_log_url) -> None:
    store = ChatLogStore(chat_log_url)  # tables never created

    result = await store.append("lost")

    assert not result.success
    assert isinstance(result.error, DatabaseError)
    await store.dispose()


async def test_slow_append_times_out(chat_log_url, monkeypatch) -> None:
    store = ChatLogStore(chat_log_url, query_timeout=0.05)
    await store.create_all()

    async def slow(message, created_at):
        await asyncio.sleep(1)

    monkeypatch.setattr(store, "_insert", slow)

    result = await store.append("stuck")

    assert isinstance(result.error, DatabaseError)
    assert "Timed out" in result.error.message
    await store.dispose()
