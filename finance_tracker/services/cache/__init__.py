"""Local offline cache package."""

from finance_tracker.services.cache.local_cache import (
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalCacheStore,
    LocalStorageFault,
    create_local_cache,
)

__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalCacheStore",
    "LocalStorageFault",
    "create_local_cache",
]
