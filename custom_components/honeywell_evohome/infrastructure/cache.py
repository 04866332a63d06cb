# cache.py
"""Short-lived read-through cache for Honeywell Evohome API reads.

This module provides the ShortTTLCache class that handles:
- TTL-based caching of expensive reads (location status)
- Lazy eviction of expired entries on read
- Coalescing of concurrent misses into a single remote fetch
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..const import API_DEFAULTS
from .request_queue import RequestQueue

_LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = API_DEFAULTS.CACHE_TTL


class ShortTTLCache:
    """Caches values per key for a fixed time-to-live.

    Fills go through a single-concurrency queue, and each fill re-checks
    the cache before fetching. Concurrent readers of a missing key therefore
    trigger exactly one fetch; the others find the value the first one stored.

    Attributes:
        cache_ttl: Cache time-to-live in seconds (0 = disabled)
    """

    def __init__(self, cache_ttl: float = DEFAULT_CACHE_TTL, name: str = "cache"):
        """Initialize the ShortTTLCache.

        Args:
            cache_ttl: Cache time-to-live in seconds (0 = disabled)
            name: Name used in log messages
        """
        self.cache_ttl = cache_ttl
        self.name = name
        # Cache storage: {cache_key: (value, timestamp)}
        self._entries: dict[str, tuple[Any, float]] = {}
        self._fill_queue = RequestQueue(name=f"{name}_fill")

    # -------------------------------------------------------------------------
    # Time utilities
    # -------------------------------------------------------------------------

    def _get_current_time(self) -> float:
        """Get current monotonic time for expiry checks."""
        return asyncio.get_event_loop().time()

    def _is_cache_valid(self, timestamp: float) -> bool:
        """Check if a cached value is still valid.

        Args:
            timestamp: Timestamp when the value was cached

        Returns:
            True if cache is still valid, False otherwise
        """
        if self.cache_ttl == 0:
            return False  # Cache disabled
        return (self._get_current_time() - timestamp) < self.cache_ttl

    # -------------------------------------------------------------------------
    # Entry access
    # -------------------------------------------------------------------------

    def contains(self, key: str) -> bool:
        """Check whether a live entry exists for key, evicting it when expired."""
        if key not in self._entries:
            return False
        _, timestamp = self._entries[key]
        if self._is_cache_valid(timestamp):
            return True
        # Cache expired, remove it
        del self._entries[key]
        return False

    def get(self, key: str) -> Any | None:
        """Get a value from cache if it's still valid.

        A cached None is indistinguishable from a miss here; use
        ``contains`` to tell them apart.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        if self.contains(key):
            _LOGGER.debug("Cache %s hit for %s", self.name, key)
            return self._entries[key][0]
        return None

    def set(self, key: str, value: Any) -> None:
        """Store a value in cache with current timestamp.

        Args:
            key: Cache key
            value: Value to cache
        """
        self._entries[key] = (value, self._get_current_time())

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Return the live entry for key, fetching it when absent or expired.

        A fetch failure propagates to the caller and leaves the cache empty
        for that key, so the next call retries.

        Args:
            key: Cache key
            fetch: Callable returning the awaitable that produces the value

        Returns:
            Cached or freshly fetched value.
        """
        if self.contains(key):
            return self._entries[key][0]

        async def _fill() -> Any:
            # Another queued fill may have populated the key in the meantime
            if self.contains(key):
                return self._entries[key][0]
            _LOGGER.debug("Cache %s miss for %s, fetching", self.name, key)
            fetched = await fetch()
            self.set(key, fetched)
            return fetched

        return await self._fill_queue.submit(_fill)

    # -------------------------------------------------------------------------
    # Cache invalidation
    # -------------------------------------------------------------------------

    def invalidate(self, key: str) -> None:
        """Drop the entry for a key, if any."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all cached values."""
        self._entries.clear()
        _LOGGER.debug("Cleared cache %s", self.name)

    async def async_shutdown(self) -> None:
        """Stop the fill worker."""
        await self._fill_queue.async_shutdown()
