# subtrend/storage/ttl_cache.py

"""In-memory TTL cache with LRU eviction and pattern invalidation."""

import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass

logger = logging.getLogger("subtrend.cache")


@dataclass
class CacheEntry:
    """A cached value and the monotonic time it was stored."""

    value: object
    timestamp: float


class TTLCache:
    """Caller-owned cache for parsed price files and trend results.

    Entries older than ``ttl`` seconds are treated as absent and evicted
    on access.  When ``max_size`` entries are held, storing a new key
    evicts the least recently used one.  A non-positive ``ttl`` turns
    the cache into a no-op.
    """

    def __init__(self, ttl: float, max_size: int = 150) -> None:
        self._ttl = ttl
        self._max_size = max_size
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> object | None:
        """Return the cached value for *key*, or ``None`` on miss/expiry."""
        if self._ttl <= 0:
            return None

        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.monotonic() - entry.timestamp > self._ttl:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None

        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: object) -> None:
        """Store *value* under *key*, evicting the LRU entry when full."""
        if self._ttl <= 0 or self._max_size <= 0:
            return

        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted %s", evicted)

        self._entries[key] = CacheEntry(
            value=value, timestamp=time.monotonic(),
        )

    def invalidate(self, pattern: str | re.Pattern[str]) -> int:
        """Drop every key matching *pattern* (``re.search`` semantics).

        Returns the number of entries removed.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        doomed = [k for k in self._entries if regex.search(k)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.info(
                "Invalidated %d cache entries matching %r",
                len(doomed),
                regex.pattern,
            )
        return len(doomed)

    def clear(self) -> int:
        """Purge all cached entries.

        Returns the number of entries that were removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache manually purged (%d entries removed)", count)
        return count
