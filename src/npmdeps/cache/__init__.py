"""Content-addressed cache APIs."""

from .keys import content_path, index_path, request_cache_key, shard
from .store import CacacheStore, CacheEntry

__all__ = [
    "CacacheStore",
    "CacheEntry",
    "content_path",
    "index_path",
    "request_cache_key",
    "shard",
]
