"""
MockStdout - In-memory capture sink for verifying what a StdoutChannel delivers.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, List, TypeVar

T = TypeVar("T")


class MockStdout(Generic[T]):
    """
    Records the raw values a consumer task receives instead of writing them out.

    Values are stored as sent, not rendered, so tests can compare typed values.
    Every access goes through an asyncio.Lock shared by the consumer task and
    whoever inspects the captured list.

    Usage:
        stdout = MockStdout()
        channel = StdoutChannel.with_mock_stdout(stdout, MockStdout())
        channel.send("hello")
        await channel.close()
        async with stdout.lock() as lines:
            assert lines == ["hello"]
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._items: List[T] = []

    def __repr__(self) -> str:
        return f"MockStdout(len={len(self._items)})"

    @asynccontextmanager
    async def lock(self) -> AsyncIterator[List[T]]:
        """Hold the lock and yield the captured list."""
        async with self._lock:
            yield self._items

    async def push(self, item: T) -> None:
        async with self._lock:
            self._items.append(item)

    async def write_item(self, item: T) -> None:
        await self.push(item)
