"""
stdout_channel - Ordered, non-blocking stdout/stderr output for asyncio programs.

Producers hand lines to a StdoutChannel and carry on; background consumer tasks
write them out in order and close() waits until everything sent has landed.
"""

__version__ = "0.1.0"

from loguru import logger

from .channel import (
    MAX_BUFFER_CAPACITY,
    ChannelCloseError,
    ConsumerTaskError,
    LineBuffer,
    LineRenderError,
    MessageQueue,
    MockStdout,
    SinkWriteError,
    StdoutChannel,
    StdoutChannelError,
    StreamSink,
)

# library convention: stay silent unless the application opts in with logger.enable("stdout_channel")
logger.disable("stdout_channel")

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
