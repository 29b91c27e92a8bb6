"""Console output: putchar, puts and printf over a text stream."""

from __future__ import annotations

import threading
from typing import Any, TextIO

from .formatting import snprintf


class Console:
    """Serialised character output to a text stream."""

    BUFFER_SIZE = 4096

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def putchar(self, c: int) -> int:
        """Write one character and return it as an unsigned byte."""
        ch = c & 0xFF
        with self._lock:
            self._stream.write(chr(ch))
        return ch

    def puts(self, s: str) -> int:
        """Write ``s`` followed by a newline."""
        with self._lock:
            self._stream.write(s)
            self._stream.write("\n")
        return 0

    def printf(self, fmt: str, *args: Any) -> int:
        """Format into a bounded buffer, write it, and return the count.

        The count is the formatted length, capped at the buffer size.
        """
        text, total = snprintf(self.BUFFER_SIZE, fmt, *args)
        with self._lock:
            self._stream.write(text)
        return min(total, self.BUFFER_SIZE)