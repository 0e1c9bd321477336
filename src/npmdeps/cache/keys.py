"""Cache key and content-address derivation for the cacache layout."""

from __future__ import annotations

import hashlib
from pathlib import PurePosixPath

CONTENT_DIR = "content-v2"
INDEX_DIR = "index-v5"

# npm's fetcher (make-fetch-happen) looks tarballs up under this key prefix.
REQUEST_CACHE_PREFIX = "make-fetch-happen:request-cache:"


def request_cache_key(url: str) -> str:
    return f"{REQUEST_CACHE_PREFIX}{url}"


def shard(hexdigest: str) -> tuple[str, str, str]:
    """Split a hex digest into ``(hex[0:2], hex[2:4], hex[4:])``."""
    return hexdigest[0:2], hexdigest[2:4], hexdigest[4:]


def index_hash(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def content_path(algorithm: str, hexdigest: str) -> PurePosixPath:
    return PurePosixPath(CONTENT_DIR, algorithm, *shard(hexdigest))


def index_path(key: str) -> PurePosixPath:
    return PurePosixPath(INDEX_DIR, *shard(index_hash(key)))
