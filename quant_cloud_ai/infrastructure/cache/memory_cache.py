"""Process-local TTL cache implementing the CacheBackend port."""

import threading
import time
from collections.abc import Callable
from typing import Any

from quant_cloud_ai.application.interfaces.cache_backend import CacheBackend


class InMemoryCacheBackend(CacheBackend):
    """Dictionary-backed cache with per-entry expiry.

    ``clock`` defaults to ``time.monotonic``; tests pass a fake to move time.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def delete_many(self, keys: list[str]) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
