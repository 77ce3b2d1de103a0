"""
LineBuffer - Reusable byte buffer for rendering values as lines.
"""

from typing import Any

from ._exceptions import LineRenderError

MAX_BUFFER_CAPACITY = 4096


class LineBuffer:
    """
    Renders values as ``str(value) + "\\n"`` into a single reusable bytearray.

    The buffer is owned by exactly one consumer task and is never shared, so it
    does no locking. Its tracked capacity (see ``capacity``) grows with the
    longest line seen and is brought back down to ``max_capacity`` before the
    next render once it has gone over, so an occasional huge line does not pin
    memory forever.
    """

    def __init__(
        self,
        max_capacity: int = MAX_BUFFER_CAPACITY,
        encoding: str = "utf-8",
        errors: str = "strict",
    ):
        """
        Initialize an empty LineBuffer.

        Args:
            max_capacity (int): Ceiling in bytes the capacity is shrunk back to. Default is 4096.
            encoding (str): Codec used to encode rendered text. Default is "utf-8".
            errors (str): Codec error handler. Default is "strict".

        Raises:
            ValueError: If max_capacity is not a positive integer.
        """
        if not isinstance(max_capacity, int) or max_capacity < 1:
            raise ValueError(f"max_capacity must be a positive integer, got {max_capacity!r}")
        self.max_capacity = max_capacity
        self.encoding = encoding
        self.errors = errors
        self._buf = bytearray()
        self._capacity = 0          # bytes reserved since the last shrink

    @property
    def capacity(self) -> int:
        """
        Bytes the buffer counts as reserved: the longest line rendered since the
        last shrink, or max_capacity right after one.

        This is a counter kept by LineBuffer itself, not the allocation size of
        the underlying bytearray, which CPython does not expose. Shrinking swaps
        in a fresh bytearray and resets the counter to max_capacity.
        """
        return self._capacity

    def __len__(self) -> int:
        return len(self._buf)

    def write_line(self, line: Any) -> memoryview:
        """
        Render a value followed by a newline into the buffer.

        The returned view aliases the buffer and is overwritten by the next call.
        Release it (``with buf.write_line(x) as view: ...``) before rendering the
        next line, otherwise the next call fails with BufferError.

        Args:
            line (Any): The value to render. Its ``str()`` is used.

        Returns:
            memoryview: View over the encoded line, terminator included.

        Raises:
            LineRenderError: If ``str(line)`` or the encoding step fails.
        """
        del self._buf[:]
        if self._capacity > self.max_capacity:
            self._buf = bytearray()
            self._capacity = self.max_capacity

        try:
            self._buf += f"{line}\n".encode(self.encoding, self.errors)
        except Exception as e:
            del self._buf[:]
            raise LineRenderError(
                f"Could not render value of type {type(line).__name__}: {e}"
            ) from e

        self._capacity = max(self._capacity, len(self._buf))
        return memoryview(self._buf)
