# small in-memory TTL cache shared by the weather and region services
# expired entries are kept so callers can fall back to stale data when an upstream call fails
# nothing is evicted; size is bounded by the distinct keys (one per region coordinate, one region list)

from __future__ import annotations
import threading
import time
from typing import Any, Callable, Dict, Tuple


class TTLCache:
    def __init__(self, ttl: float, time_func: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, Any]] = {}
        # pool workers share one service instance, and so one cache
        self._lock = threading.Lock()

    def get(self, key: str, allow_stale: bool = False) -> Any:
        with self._lock:
            item = self._storage.get(key)
        if item is None:
            return None
        stored_at, value = item
        if not allow_stale and self._time_func() - stored_at >= self.ttl:
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._storage[key] = (self._time_func(), value)
