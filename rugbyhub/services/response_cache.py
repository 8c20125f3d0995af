"""Shared response cache.

The gateway keys responses by normalized request identity and delegates
freshness to the store's own TTL handling. Stores are swappable behind the
CacheStore protocol; MemoryCacheStore is the in-process default.

Writes are meant to be deferred (see RequestDispatcher), so store() is never
awaited on the reply path.
"""

import logging
import time
from collections import Counter
from collections.abc import Callable
from typing import Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from rugbyhub.core.types import CachedResponse

logger = logging.getLogger(__name__)

# Lookup kinds for hit/miss accounting
RESPONSE_LOOKUP = "response"
DIRECTORY_LOOKUP = "directory"


def normalize_cache_key(url: str) -> str:
    """Canonical cache key: scheme + host + path + sorted query, no fragment.

    >>> normalize_cache_key("HTTP://Example.com/?variety=max&a=1#top")
    'http://example.com/?a=1&variety=max'
    """
    parts = urlsplit(url)
    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, query, ""))


class CacheStore(Protocol):
    """Minimal async key/value store with per-entry TTL."""

    async def get(self, key: str) -> CachedResponse | None: ...

    async def set(self, key: str, value: CachedResponse, ttl_seconds: int) -> None: ...

    def stats(self) -> dict: ...


class MemoryCacheStore:
    """In-process TTL store.

    Expired entries are evicted on read. When max_entries is reached the entry
    closest to expiry is evicted first. Last write wins.
    """

    def __init__(self, max_entries: int = 512, clock: Callable[[], float] = time.monotonic):
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, CachedResponse]] = {}
        self._evictions = 0

    async def get(self, key: str) -> CachedResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: CachedResponse, ttl_seconds: int) -> None:
        if key not in self._entries and len(self._entries) >= self._max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[oldest]
            self._evictions += 1
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "max_entries": self._max_entries,
            "evictions": self._evictions,
        }


class CacheGateway:
    """get/put against the shared response cache with hit/miss accounting.

    Lookups are counted per kind, so league directory reads do not skew the
    response hit rate reported by /health.
    """

    def __init__(self, store: CacheStore | None = None):
        self._store = store if store is not None else MemoryCacheStore()
        self._hits: Counter[str] = Counter()
        self._misses: Counter[str] = Counter()

    async def lookup(self, key: str, kind: str = RESPONSE_LOOKUP) -> CachedResponse | None:
        cached = await self._store.get(key)
        if cached is None:
            self._misses[kind] += 1
        else:
            self._hits[kind] += 1
        return cached

    async def store(self, key: str, response: CachedResponse, ttl_seconds: int) -> None:
        """Write a response. Non-positive TTLs are not cached."""
        if ttl_seconds <= 0:
            return
        await self._store.set(key, response, ttl_seconds)
        logger.debug(f"Cached {key} for {ttl_seconds // 3600}h {(ttl_seconds % 3600) // 60}m")

    def stats(self) -> dict:
        """Get cache statistics.

        hits/misses cover proxied responses only; directory lookups are
        reported as directory_hits/directory_misses.
        """
        return {
            "hits": self._hits[RESPONSE_LOOKUP],
            "misses": self._misses[RESPONSE_LOOKUP],
            "directory_hits": self._hits[DIRECTORY_LOOKUP],
            "directory_misses": self._misses[DIRECTORY_LOOKUP],
            **self._store.stats(),
        }
