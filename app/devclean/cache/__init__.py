"""Persistent cache of AI risk assessments.

Public API:
- AssessmentCache: hash-gated lookups and stores
- CacheStorage: read/write storage protocol
- FallbackStorage, RootFileStorage, HashedFileStorage: storage backends
- hash_file: SHA-256 of a manifest
"""

from devclean.cache.storage import (
    CacheStorage,
    CacheWriteError,
    FallbackStorage,
    HashedFileStorage,
    RootFileStorage,
    default_storage,
)
from devclean.cache.store import AssessmentCache, CacheEntry, CacheFile, hash_file

__all__ = [
    "AssessmentCache",
    "CacheEntry",
    "CacheFile",
    "CacheStorage",
    "CacheWriteError",
    "FallbackStorage",
    "HashedFileStorage",
    "RootFileStorage",
    "default_storage",
    "hash_file",
]
