"""
Stream sinks and the consumer loop that drains a MessageQueue into a sink.

A sink is any object with an ``async write_item(item)`` method. StreamSink
writes rendered lines to a real stream; MockStdout captures raw values.
Both are driven by the same process_queue loop.
"""

import asyncio
import sys
from typing import Any, Optional, Protocol, TextIO, Union

from loguru import logger

from ._exceptions import SinkWriteError
from ._line_buffer import LineBuffer
from ._message_queue import Close, MessageQueue

STREAM_NAMES = ("stdout", "stderr")


class Sink(Protocol):
    async def write_item(self, item: Any) -> None:
        ...


class StreamSink:
    """
    Writes each item as one line to a text stream.

    When ``stream`` is a name ("stdout" or "stderr") the matching ``sys``
    attribute is looked up on every write, so redirection done after the
    channel was created (pytest's capsys, contextlib.redirect_stdout) is
    honored. A file object may be passed instead.
    """

    def __init__(
        self,
        stream: Union[str, TextIO],
        *,
        buffer: Optional[LineBuffer] = None,
        flush: bool = True,
    ):
        """
        Args:
            stream (Union[str, TextIO]): "stdout", "stderr" or a file object.
            buffer (Optional[LineBuffer]): Buffer used for rendering. A new default one if None.
            flush (bool): Whether to flush the stream after every line. Default is True.

        Raises:
            ValueError: If stream is a string other than "stdout" or "stderr".
        """
        if isinstance(stream, str) and stream not in STREAM_NAMES:
            raise ValueError(f"Unknown stream '{stream}'. Expected one of {STREAM_NAMES}.")
        self._stream = stream
        self._buffer = buffer if buffer is not None else LineBuffer()
        self.flush = flush

    @property
    def name(self) -> str:
        if isinstance(self._stream, str):
            return self._stream
        return getattr(self._stream, "name", repr(self._stream))

    @property
    def stream(self) -> TextIO:
        if isinstance(self._stream, str):
            return getattr(sys, self._stream)
        return self._stream

    @property
    def buffer(self) -> LineBuffer:
        return self._buffer

    def __repr__(self) -> str:
        return f"StreamSink({self.name!r})"

    async def write_item(self, item: Any) -> None:
        with self._buffer.write_line(item) as view:
            await asyncio.to_thread(self._write_all, view)

    def _write_all(self, data: memoryview) -> None:
        stream = self.stream
        try:
            raw = getattr(stream, "buffer", None)
            if raw is None:
                stream.write(bytes(data).decode(self._buffer.encoding, self._buffer.errors))
                if self.flush:
                    stream.flush()
            else:
                # push out any text still pending in the wrapper before writing bytes under it
                stream.flush()
                raw.write(data)
                if self.flush:
                    raw.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to write to {self.name}: {e}") from e


async def process_queue(queue: MessageQueue, sink: Sink) -> None:
    """
    Consumer task body: move messages from ``queue`` into ``sink`` until CLOSE.

    The first failure ends the loop and propagates to whoever awaits the task.
    Messages still queued at that point are never processed.

    Args:
        queue (MessageQueue): The queue to drain.
        sink (Sink): Destination for every Mesg item.
    """
    logger.debug("Consumer for {!r} started", sink)
    count = 0
    while True:
        message = await queue.pop()
        if isinstance(message, Close):
            break
        await sink.write_item(message.item)
        count += 1
    logger.debug("Consumer for {!r} stopped after {} line(s)", sink, count)
