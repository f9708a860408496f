from __future__ import annotations

from typing import List

from .constants import FRAME_DELIMITER, MAX_LINE_SIZE
from .errors import MalformedCommandError


class LineFramer:
    """Splits a byte stream into newline-terminated command lines.

    Usage:
        framer = LineFramer()
        for line in framer.feed(data_from_socket):
            command = decode_command(line)

    Chunks can be any size: several commands in one chunk and one command
    spread over several chunks both work. Only complete lines are returned;
    the bytes after the last newline stay buffered for the next chunk.
    """

    def __init__(self, max_line_size: int = MAX_LINE_SIZE) -> None:
        self.max_line_size = max_line_size
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a newline."""
        return len(self._buffer)

    def feed(self, data: bytes) -> List[bytes]:
        """Add received data and return every line it completed, in order."""
        self._buffer.extend(data)
        end = self._buffer.rfind(FRAME_DELIMITER)
        if end < 0:
            if len(self._buffer) > self.max_line_size:
                size = len(self._buffer)
                self._buffer.clear()
                raise MalformedCommandError(f"Line too long: {size} bytes without a delimiter")
            return []

        complete = bytes(self._buffer[:end])
        del self._buffer[: end + len(FRAME_DELIMITER)]

        lines = []
        for raw in complete.split(FRAME_DELIMITER):
            # Only the CR of a CRLF is trimmed; spaces may belong to an empty trailing argument.
            line = raw.rstrip(b"\r")
            if line:
                lines.append(line)
        return lines

    def close(self) -> bytes:
        """Drop and return the unterminated remainder; it is never a command."""
        remainder = bytes(self._buffer)
        self._buffer.clear()
        return remainder


__all__ = ["LineFramer"]
