"""In-process TTL cache for read-only report queries.

Uses cachetools.TTLCache; each process keeps its own instances. Report
results are allowed to lag behind the messages table by up to *ttl*
seconds. Writers that invalidate whole datasets (the purge command) call
``clear()``.
"""

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Sentinel object to distinguish "not in cache" from cached None values
_MISSING = object()

F = TypeVar("F", bound=Callable[..., Any])


class AsyncTTLCache:
    """Async-aware TTL cache with one lock per key.

    The per-key lock collapses concurrent misses for the same report into a
    single query.
    """

    def __init__(self, maxsize: int = 128, ttl: float = 60.0):
        self._maxsize = maxsize
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
            # Prune locks that no longer guard a cached entry or a running query
            if len(self._locks) > self._maxsize * 2:
                for k in list(self._locks):
                    if k != key and k not in self._cache and not self._locks[k].locked():
                        del self._locks[k]
        return lock

    def get(self, key: str) -> Any:
        """Return cached value or ``_MISSING``."""
        return self._cache.get(key, _MISSING)

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def invalidate(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()
        self._locks.clear()

    @property
    def size(self) -> int:
        return len(self._cache)


def cached(cache: AsyncTTLCache, key_func: Callable[..., str]):
    """Decorator for caching async query results.

    ``key_func`` receives the same ``(*args, **kwargs)`` as the decorated
    function and returns the cache key string. Failures are not cached and
    propagate to the caller unchanged.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache_key = key_func(*args, **kwargs)

            result = cache.get(cache_key)
            if result is not _MISSING:
                return result

            # Double-checked under the key lock
            async with cache._get_lock(cache_key):
                result = cache.get(cache_key)
                if result is not _MISSING:
                    logger.debug("Cache hit after wait for %s", cache_key)
                    return result

                result = await func(*args, **kwargs)
                cache.set(cache_key, result)
                return result

        wrapper.cache = cache  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator
