"""In-process memory cache with time-based expiry.

The memory tier sits in front of the persistent store and answers repeated
queries without touching the disk. Keys are the literal query strings
(prefixed per entity kind); they are not normalized.

DESIGN DECISIONS:
- One process-wide TTL, configured at construction
- Passive expiry: expired entries are reported as absent but are only
  reclaimed when overwritten
- No size bound and no LRU eviction
- Guarded by a reader/writer lock; ``get`` calls run concurrently
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from recipe_finder.caching.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the timestamp after which it is no longer served.

    Attributes:
        value: The cached payload
        expires_at: Expiry as seconds since the epoch (per the cache clock)
    """
    value: T
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class MemoryCache(Generic[T]):
    """Thread-safe key/value cache with a fixed time-to-live.

    Usage:
        cache = MemoryCache(ttl_seconds=3600)
        cache.set("search_eggs,milk", recipes)
        recipes = cache.get("search_eggs,milk")  # None once expired
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """Initialize an empty cache.

        Args:
            ttl_seconds: Lifetime of every entry, in seconds
            clock: Source of the current time (seconds since the epoch)

        Raises:
            ValueError: If ttl_seconds is negative
        """
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = ReadWriteLock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired.

        Args:
            key: Cache key

        Returns:
            The cached value if present and fresh, None otherwise
        """
        with self._lock.read_locked():
            entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug("Memory cache entry expired: %s", key)
            return None
        return entry.value

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        """Store a value, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Override for the configured TTL (defaults to it)
        """
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        with self._lock.write_locked():
            self._entries[key] = entry

    def __len__(self) -> int:
        """Number of stored entries, expired ones included."""
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
