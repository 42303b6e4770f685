# src/core/route_cache.py

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from src.monitoring.route_metrics import RouteMetrics
from src.utils.error_handling import TechnicalError, TechnicalErrorMessage
from .serializer import RouteSerializer

T = TypeVar('T')

DEFAULT_MAX_SIZE = 999


class MemoryStash:
    """Bounded in-memory string store with LRU eviction and optional expiry"""

    def __init__(self,
                 max_size: int = DEFAULT_MAX_SIZE,
                 expire_after: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            max_size: Maximum number of entries kept
            expire_after: Seconds an entry lives after being written,
                None keeps entries until evicted
            clock: Monotonic time source
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.expire_after = expire_after
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[str, Optional[float]]]" = OrderedDict()
        self._lock = threading.Lock()

    def _is_expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    def save(self, key: str, value: str) -> str:
        expires_at = None
        if self.expire_after is not None:
            expires_at = self._clock() + self.expire_after
        with self._lock:
            self._entries[key] = (value, expires_at)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
        return value

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._is_expired(expires_at):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def evict(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def evict_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[str]:
        with self._lock:
            expired = [k for k, (_, exp) in self._entries.items() if self._is_expired(exp)]
            for key in expired:
                del self._entries[key]
            return list(self._entries.keys())

    def size(self) -> int:
        return len(self.keys())


class ObjectCache(Generic[T]):
    """Stores objects in a stash as JSON documents"""

    def __init__(self,
                 stash: MemoryStash,
                 serializer: RouteSerializer,
                 factory: Callable[[Dict[str, Any]], T]) -> None:
        self.stash = stash
        self.serializer = serializer
        self.factory = factory

    def save(self, key: str, value: T) -> T:
        self.stash.save(key, self.serializer.dumps(value))
        return value

    def get(self, key: str) -> Optional[T]:
        raw = self.stash.get(key)
        if raw is None:
            return None
        try:
            return self.factory(self.serializer.loads(raw))
        except (TypeError, KeyError, ValueError) as e:
            raise TechnicalError(TechnicalErrorMessage.CACHE_ERROR, f"Corrupt cache entry {key}") from e


class FunctionalCacheOps(Generic[T]):
    """Async facade over an object cache"""

    def __init__(self,
                 object_cache: ObjectCache[T],
                 metrics: Optional[RouteMetrics] = None) -> None:
        self.object_cache = object_cache
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)

    async def save_in_cache(self, key: str, value: T) -> T:
        saved = self.object_cache.save(key, value)
        self.logger.debug(f"Saved cache entry {key}")
        if self.metrics:
            self.metrics.set_cache_size(self.object_cache.stash.size())
        return saved

    async def get_from_cache(self, key: str) -> Optional[T]:
        value = self.object_cache.get(key)
        if self.metrics:
            self.metrics.record_lookup(value is not None)
        return value

    async def evict(self, key: str) -> bool:
        removed = self.object_cache.stash.evict(key)
        if self.metrics:
            self.metrics.set_cache_size(self.object_cache.stash.size())
        return removed

    async def evict_all(self) -> None:
        self.object_cache.stash.evict_all()
        if self.metrics:
            self.metrics.set_cache_size(0)

    def keys(self) -> List[str]:
        return self.object_cache.stash.keys()
