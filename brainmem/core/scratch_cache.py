"""
Short-term scratch buffer.

Bounded FIFO of text entries; the oldest entry is evicted once capacity is
exceeded.
"""

import time
from collections import deque

from brainmem.models.memory import ScratchEntry
from brainmem.utils.exceptions import ValidationError
from brainmem.utils.logger import get_logger

logger = get_logger(__name__)


class ScratchCache:
    """Bounded first-in-first-out text buffer."""

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValidationError("Capacity must be at least 1", context={"capacity": capacity})
        self._capacity = capacity
        self._entries: deque[ScratchEntry] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        return len(self._entries)

    def add(self, text: str) -> ScratchEntry:
        """
        Append an entry, evicting the oldest one if capacity is exceeded.

        Raises:
            ValidationError: If text is empty or whitespace
        """
        if not text or not text.strip():
            raise ValidationError("Memory text cannot be empty")

        entry = ScratchEntry(text=text.strip(), timestamp=int(time.time() * 1000))
        self._entries.append(entry)

        if len(self._entries) > self._capacity:
            self._entries.popleft()
            logger.debug("Scratch cache full, evicted oldest entry")

        return entry

    def get_all(self) -> list[ScratchEntry]:
        """Return a copy of all entries, newest first."""
        return list(reversed(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def set_capacity(self, capacity: int) -> None:
        """
        Change capacity and evict oldest entries until within the new bound.

        Raises:
            ValidationError: If capacity is below 1
        """
        if capacity < 1:
            raise ValidationError("Capacity must be at least 1", context={"capacity": capacity})

        self._capacity = capacity
        while len(self._entries) > self._capacity:
            self._entries.popleft()
