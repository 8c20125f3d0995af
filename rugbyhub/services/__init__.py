"""Service layer."""

from rugbyhub.services.response_cache import (
    CacheGateway,
    CacheStore,
    MemoryCacheStore,
    normalize_cache_key,
)

__all__ = [
    "CacheGateway",
    "CacheStore",
    "MemoryCacheStore",
    "normalize_cache_key",
]
