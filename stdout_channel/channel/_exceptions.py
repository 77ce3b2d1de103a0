"""
Exceptions raised by StdoutChannel and its consumer tasks.

Every failure a consumer task runs into is carried back to the caller of
StdoutChannel.close(); nothing is retried or dropped on the way.
"""

from typing import List


class StdoutChannelError(Exception):
    """Base class for all channel errors."""


class LineRenderError(StdoutChannelError):
    """Raised when a value cannot be rendered into a line of text."""


class SinkWriteError(StdoutChannelError):
    """Raised when the underlying stream fails during write or flush."""


class ConsumerTaskError(StdoutChannelError):
    """Raised when a consumer task was cancelled or failed unexpectedly."""


class ChannelCloseError(StdoutChannelError):
    """
    Raised by close() when both the stdout and the stderr consumer failed.

    Attributes:
        errors (List[StdoutChannelError]): The failures, in stdout, stderr order.
    """

    def __init__(self, message: str, errors: List[StdoutChannelError]):
        super().__init__(message)
        self.errors = errors
