"""
Tests for the connection manager.

Covers the pool bound, the waiting queue and its limit, timeouts and the
health check.
"""

import asyncio

import pytest

from roybot.db.exceptions import DatabaseConnectionError
from roybot.db.session import ConnectionManager

pytestmark = pytest.mark.anyio


class TestPoolBound:
    """Callers beyond pool_size wait for a slot."""

    async def test_excess_caller_waits_for_release(self, database_url) -> None:
        manager = ConnectionManager(database_url, pool_size=2, acquire_timeout=None)
        first = await manager.acquire()
        second = await manager.acquire()

        waiter = asyncio.create_task(manager.acquire())
        await asyncio.sleep(0.05)
        assert not waiter.done()
        assert manager.waiting == 1

        await manager.release(first)
        third = await asyncio.wait_for(waiter, timeout=2)
        assert manager.waiting == 0

        await manager.release(second)
        await manager.release(third)
        await manager.dispose()

    async def test_unbounded_queue_never_rejects(self, database_url) -> None:
        manager = ConnectionManager(database_url, pool_size=1, queue_limit=0, acquire_timeout=None)
        held = await manager.acquire()

        async def use_connection() -> bool:
            async with manager.connection():
                return True

        tasks = [asyncio.create_task(use_connection()) for _ in range(5)]
        await asyncio.sleep(0.05)
        assert manager.waiting == 5

        await manager.release(held)
        results = await asyncio.wait_for(asyncio.gather(*tasks), timeout=5)
        assert results == [True] * 5
        await manager.dispose()

    async def test_queue_limit_rejects_extra_waiters(self, database_url) -> None:
        manager = ConnectionManager(database_url, pool_size=1, queue_limit=1, acquire_timeout=None)
        held = await manager.acquire()
        waiter = asyncio.create_task(manager.acquire())
        await asyncio.sleep(0.05)

        with pytest.raises(DatabaseConnectionError):
            await manager.acquire()

        await manager.release(held)
        queued = await asyncio.wait_for(waiter, timeout=2)
        await manager.release(queued)
        await manager.dispose()

    async def test_acquire_timeout(self, database_url) -> None:
        manager = ConnectionManager(database_url, pool_size=1, acquire_timeout=0.05)
        held = await manager.acquire()

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await manager.acquire()
        assert "Timed out" in str(exc_info.value)
        assert manager.waiting == 0

        await manager.release(held)
        await manager.dispose()

    async def test_connection_released_on_error(self, database_url) -> None:
        manager = ConnectionManager(database_url, pool_size=1, acquire_timeout=0.5)

        with pytest.raises(RuntimeError):
            async with manager.connection():
                raise RuntimeError("boom")

        async with manager.connection() as conn:
            assert conn is not None
        await manager.dispose()


class TestConfiguration:
    def test_rejects_empty_pool(self, database_url) -> None:
        with pytest.raises(ValueError):
            ConnectionManager(database_url, pool_size=0)

    def test_rejects_negative_queue_limit(self, database_url) -> None:
        with pytest.raises(ValueError):
            ConnectionManager(database_url, queue_limit=-1)


class TestHealthCheck:
    async def test_reachable_database(self, manager) -> None:
        assert await manager.health_check() is True

    async def test_unreachable_database_reports_false(self, tmp_path) -> None:
        url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'roy.db'}"
        manager = ConnectionManager(url, pool_size=1, acquire_timeout=1)

        assert await manager.health_check() is False

        # The failed connect must not leak the only slot
        assert await manager.health_check() is False
        await manager.dispose()
