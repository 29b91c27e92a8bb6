"""Bump-pointer allocation over an address range; memory is never freed."""

from __future__ import annotations

import threading

from .errors import NoMemoryError

_ADDR_MASK = (1 << 64) - 1


class BumpAllocator:
    """Hands out aligned addresses from a range, moving a pointer forward.

    ``end`` is the last address of the range.
    """

    def __init__(self, start: int, size: int) -> None:
        if start < 0 or size < 0:
            raise ValueError("start and size must not be negative")
        self.start = start
        self.end = (start + size - 1) & _ADDR_MASK
        self._lock = threading.Lock()

    @classmethod
    def from_bounds(cls, start: int, end: int) -> "BumpAllocator":
        """Create an allocator from a start address and a last address."""
        allocator = cls(start, 0)
        allocator.end = end & _ADDR_MASK
        return allocator

    def alloc(self, size: int, align: int) -> int:
        """Return the address of ``size`` bytes aligned to ``align``.

        Raises NoMemoryError when the range is exhausted or the request
        is empty at an already aligned position.
        """
        if align <= 0 or align & (align - 1):
            raise ValueError(f"alignment must be a power of two, got {align}")
        if size < 0:
            raise ValueError("size must not be negative")
        with self._lock:
            address = ((self.start + align - 1) & ~(align - 1)) & _ADDR_MASK
            new_start = (address + size) & _ADDR_MASK
            if new_start > self.end or new_start <= self.start:
                raise NoMemoryError(f"cannot allocate {size} bytes aligned to {align}")
            self.start = new_start
            return address