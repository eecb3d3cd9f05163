"""In-process TTL cache."""

from __future__ import annotations

import time
from threading import Lock
from typing import Callable


class MemoryCache:
    """Dict-backed cache; entries expire ttl_sec after set (monotonic clock)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_sec: int) -> None:
        if ttl_sec <= 0:
            return
        with self._lock:
            self._data[key] = (value, self._clock() + ttl_sec)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)
