"""
MessageQueue - Unbounded FIFO of StdoutMessage values feeding one consumer task.
"""

import asyncio
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class Mesg(Generic[T]):
    """One line worth of content."""
    item: T


class Close:
    """Sentinel telling the consumer task to stop."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CLOSE"


CLOSE = Close()

StdoutMessage = Union[Mesg[T], Close]


class MessageQueue(Generic[T]):
    """
    Multi-producer, single-consumer queue with non-blocking push.

    The queue belongs to the event loop running when it is created. Pushes
    made from that loop go straight in; pushes from other threads are handed
    to the loop with ``call_soon_threadsafe``, which keeps each producer's
    messages in the order they were pushed.
    """

    def __init__(self):
        # raises RuntimeError when there is no running loop
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()

    def __len__(self) -> int:
        return self._queue.qsize()

    def push(self, message: StdoutMessage) -> None:
        """
        Append a message. Never blocks.

        Args:
            message (StdoutMessage): A Mesg or CLOSE.
        """
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._queue.put_nowait(message)
        elif self._loop.is_closed():
            logger.debug("Event loop is closed, dropping {!r}", message)
        else:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, message)

    async def pop(self) -> StdoutMessage:
        """Wait for and return the next message."""
        return await self._queue.get()
