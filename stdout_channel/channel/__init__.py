"""
StdoutChannel - Main module containing the StdoutChannel class.

This module provides the StdoutChannel facade that lets any number of producers
enqueue lines for stdout and stderr without waiting on I/O. It is composed of
specialized components:
- MessageQueue: Unbounded FIFO per stream
- LineBuffer: Reusable rendering buffer with a capacity ceiling
- StreamSink / MockStdout: Real stream output and in-memory capture
- process_queue: The consumer task loop binding one queue to one sink
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

from loguru import logger

from .._aux._aux import _resolve
from ._channel_config import SINK_NAMES, load_channel_config
from ._exceptions import (
    ChannelCloseError,
    ConsumerTaskError,
    LineRenderError,
    SinkWriteError,
    StdoutChannelError,
)
from ._line_buffer import MAX_BUFFER_CAPACITY, LineBuffer
from ._message_queue import CLOSE, Mesg, MessageQueue
from ._mock_stdout import MockStdout
from ._sink import Sink, StreamSink, process_queue

__all__ = [
    "StdoutChannel",
    "MockStdout",
    "StreamSink",
    "LineBuffer",
    "MessageQueue",
    "MAX_BUFFER_CAPACITY",
    "StdoutChannelError",
    "LineRenderError",
    "SinkWriteError",
    "ConsumerTaskError",
    "ChannelCloseError",
]

T = TypeVar("T")

STREAMS = ("stdout", "stderr")


@dataclass
class _ChannelState:
    """State shared by a StdoutChannel and all of its clones."""
    stdout_sink: Sink
    stderr_sink: Sink
    stdout_queue: MessageQueue
    stderr_queue: MessageQueue
    stdout_task: Optional[asyncio.Task] = None
    stderr_task: Optional[asyncio.Task] = None
    stdout_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    stderr_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class StdoutChannel(Generic[T]):
    """
    StdoutChannel class to decouple line producers from stdout/stderr I/O.

    Each stream gets its own queue and a background consumer task, both created
    when the channel is constructed. ``send``/``send_err`` only enqueue, so they
    never block and never fail. Lines reach each stream in the order they were
    sent; there is no ordering between the two streams.

    ``close`` queues a close marker behind everything already sent and waits for
    both consumers to drain, so every line sent before it has been written once
    it returns. It is safe to call repeatedly and from any clone. A channel that
    is never closed leaves its consumer tasks waiting forever.

    Must be created while an asyncio event loop is running.

    Usage:
        channel = StdoutChannel()
        channel.send("stdout: Hey There")
        channel.send_err("stderr: How it goes")
        await channel.close()
    """

    def __init__(
        self,
        stdout_sink: Optional[Sink] = None,
        stderr_sink: Optional[Sink] = None,
        *,
        config_path: Optional[str] = None,
        item_type: Optional[Callable[[Any], T]] = None,
        max_buffer_capacity: Optional[int] = None,
        encoding: Optional[str] = None,
    ):
        """
        Initialize StdoutChannel and start its consumer tasks.

        Args:
            stdout_sink (Optional[Sink]): Destination for send(). Defaults to None, which
                builds a StreamSink from the configuration (sys.stdout by default).
            stderr_sink (Optional[Sink]): Destination for send_err(). Defaults to None, which
                builds a StreamSink from the configuration (sys.stderr by default).
            config_path (Optional[str]): Path to a YAML configuration file. Defaults to None,
                which uses the default config file.
            item_type (Optional[Callable[[Any], T]]): Converter applied to every sent value.
                Defaults to None, which enqueues values unchanged.
            max_buffer_capacity (Optional[int]): Overrides 'buffer.max_capacity'.
            encoding (Optional[str]): Overrides 'buffer.encoding'.

        Raises:
            RuntimeError: If no event loop is running.
            ValueError: If the configuration is invalid.
        """
        self._item_type = item_type

        if stdout_sink is None or stderr_sink is None:
            self.config = load_channel_config(config_path)
            if stdout_sink is None:
                stdout_sink = self._make_stream_sink("stdout", max_buffer_capacity, encoding)
            if stderr_sink is None:
                stderr_sink = self._make_stream_sink("stderr", max_buffer_capacity, encoding)
        else:
            self.config = {}

        self._state = _ChannelState(
            stdout_sink=stdout_sink,
            stderr_sink=stderr_sink,
            stdout_queue=MessageQueue(),
            stderr_queue=MessageQueue(),
        )
        for stream in STREAMS:
            task = asyncio.create_task(
                process_queue(getattr(self._state, f"{stream}_queue"), getattr(self._state, f"{stream}_sink")),
                name=f"stdout-channel-{stream}",
            )
            setattr(self._state, f"{stream}_task", task)
        logger.debug("StdoutChannel started with sinks {!r} and {!r}", stdout_sink, stderr_sink)

    @classmethod
    def with_mock_stdout(
        cls,
        mock_stdout: MockStdout,
        mock_stderr: MockStdout,
        *,
        item_type: Optional[Callable[[Any], T]] = None,
    ) -> "StdoutChannel[T]":
        """
        Create a channel whose consumers append to capture sinks instead of real streams.

        Args:
            mock_stdout (MockStdout): Receives values passed to send().
            mock_stderr (MockStdout): Receives values passed to send_err().
            item_type (Optional[Callable[[Any], T]]): Converter applied to every sent value.

        Returns:
            StdoutChannel: The running channel.
        """
        return cls(mock_stdout, mock_stderr, item_type=item_type)

    def _make_stream_sink(
        self,
        stream: str,
        max_buffer_capacity: Optional[int],
        encoding: Optional[str],
    ) -> StreamSink:
        buffer_conf = self.config.get("buffer", {})
        buffer = LineBuffer(
            max_capacity=_resolve(max_buffer_capacity, buffer_conf, "max_capacity", MAX_BUFFER_CAPACITY),
            encoding=_resolve(encoding, buffer_conf, "encoding", "utf-8"),
            errors=_resolve(None, buffer_conf, "errors", "strict"),
        )
        target = SINK_NAMES[self.config["sinks"][stream]]
        return StreamSink(target, buffer=buffer, flush=self.config["flush"])

    # ========================================================================================
    # CLONING
    # ========================================================================================

    def clone(self) -> "StdoutChannel[T]":
        """
        Return another handle on the same channel.

        The clone shares queues, consumer tasks and close state with this
        instance, so closing either closes both.
        """
        other = object.__new__(type(self))
        other.__dict__.update(self.__dict__)
        return other

    def __copy__(self) -> "StdoutChannel[T]":
        return self.clone()

    def __repr__(self) -> str:
        return "StdoutChannel"

    @property
    def stdout_sink(self) -> Sink:
        return self._state.stdout_sink

    @property
    def stderr_sink(self) -> Sink:
        return self._state.stderr_sink

    # ========================================================================================
    # PRODUCER METHODS
    # ========================================================================================

    def send(self, item: Any) -> None:
        """
        Queue a line for stdout. Never blocks.

        Sending after close() is not an error, but the line is never written.
        """
        self._state.stdout_queue.push(Mesg(self._convert(item)))

    def send_err(self, item: Any) -> None:
        """
        Queue a line for stderr. Never blocks.

        Sending after close() is not an error, but the line is never written.
        """
        self._state.stderr_queue.push(Mesg(self._convert(item)))

    def _convert(self, item: Any) -> T:
        if self._item_type is None:
            return item
        return self._item_type(item)

    # ========================================================================================
    # SHUTDOWN
    # ========================================================================================

    @property
    def closed(self) -> bool:
        """True once close() has joined both consumer tasks."""
        return self._state.stdout_task is None and self._state.stderr_task is None

    async def close(self) -> None:
        """
        Flush both streams and stop the consumer tasks.

        A close marker is queued on stdout, then stderr, behind every line
        already sent. Each consumer task is then awaited under its slot lock and
        removed from the slot once done. A stream already joined by an earlier close()
        (on this handle or a clone) is skipped.

        Raises:
            SinkWriteError: If a stream failed while writing.
            LineRenderError: If a value could not be rendered.
            ConsumerTaskError: If a consumer was cancelled or failed unexpectedly.
            ChannelCloseError: If both consumers failed.
        """
        self._state.stdout_queue.push(CLOSE)
        self._state.stderr_queue.push(CLOSE)

        errors: List[StdoutChannelError] = []
        for stream in STREAMS:
            try:
                await self._join(stream)
            except StdoutChannelError as e:
                errors.append(e)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise ChannelCloseError(
                f"Both consumers failed: stdout: {errors[0]}; stderr: {errors[1]}",
                errors,
            ) from errors[0]

    async def _join(self, stream: str) -> None:
        """
        Wait for the consumer task of ``stream`` to finish, then empty its slot.

        The slot lock is held until the task is done, so a concurrent close()
        from a clone only returns once this stream has been flushed. If the
        caller is cancelled (e.g. by a timeout around close()), the consumer
        keeps running and stays in its slot for a later close() to join.

        Args:
            stream (str): "stdout" or "stderr".
        """
        async with getattr(self._state, f"{stream}_lock"):
            task = getattr(self._state, f"{stream}_task")
            if task is None:
                logger.debug("{} consumer already closed", stream)
                return

            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
                setattr(self._state, f"{stream}_task", None)
                raise ConsumerTaskError(f"{stream} consumer task was cancelled") from None
            except StdoutChannelError:
                setattr(self._state, f"{stream}_task", None)
                raise
            except Exception as e:
                setattr(self._state, f"{stream}_task", None)
                raise ConsumerTaskError(f"{stream} consumer task failed: {e}") from e

            setattr(self._state, f"{stream}_task", None)
        logger.debug("{} consumer closed", stream)

    async def __aenter__(self) -> "StdoutChannel[T]":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()
