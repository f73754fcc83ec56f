"""HRPulse cache layer."""

from hrpulse.cache.ttl import CacheEntry, TTLCache, make_cache_key

__all__ = [
    "CacheEntry",
    "TTLCache",
    "make_cache_key",
]
