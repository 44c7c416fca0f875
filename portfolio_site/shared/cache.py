"""
Small in-process cache with a time-to-live.

Entries are served until they expire or are dropped by
invalidate(). A ttl of 0 (or less) means entries never expire and only
invalidate()/clear() removes them.
"""
import logging
import threading
import time
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _expired(self, stored_at: float) -> bool:
        if self.ttl_seconds <= 0:
            return False
        return self._clock() - stored_at >= self.ttl_seconds

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            stored_at, value = entry
            if self._expired(stored_at):
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            if self._entries.pop(key, None) is not None:
                logger.debug(f"Cache entry '{key}' invalidated")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING
