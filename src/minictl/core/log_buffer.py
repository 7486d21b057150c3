"""Bounded per-project log retention."""

from __future__ import annotations

import threading
from collections import deque

from minictl.models.project import LogEntry, LogStream

DEFAULT_LOG_CAPACITY = 500


class LogBuffer:
    """Append-only FIFO of log entries that evicts the oldest beyond capacity."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        if capacity < 1:
            msg = "capacity must be positive"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._total_written = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_written(self) -> int:
        """Entries appended over the buffer's lifetime, evicted ones included."""
        with self._lock:
            return self._total_written

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            self._total_written += 1

    def write(self, stream: LogStream, text: str) -> LogEntry:
        entry = LogEntry(stream=stream, text=text)
        self.append(entry)
        return entry

    def tail(self, limit: int | None = None) -> list[LogEntry]:
        """Return the most recent ``limit`` entries in chronological order."""
        with self._lock:
            entries = list(self._entries)
        if limit is None:
            return entries
        if limit <= 0:
            return []
        return entries[-limit:]
