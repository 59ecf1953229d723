# cache.py
import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """
    In-memory cache for read results, protecting the asset service's rate limits.

    Entries expire after their TTL and are evicted lazily on the next get.
    Values are shallow-copied in and out, so callers may mutate what they get.
    Any mutation clears the whole cache: a folder-tree change can affect an
    unbounded number of listing keys.
    """

    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() < entry.expires_at:
                logging.debug(f"Serving from cache: {key}")
                return copy.copy(entry.value)
            del self._entries[key]
            return None

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        if ttl is None:
            ttl = self.default_ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=copy.copy(value), expires_at=self._clock() + ttl)

    def clear(self):
        logging.info("Clearing response cache")
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
