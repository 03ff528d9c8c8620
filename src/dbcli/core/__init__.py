"""Core settings and cache primitives for dbcli."""

from dbcli.core.cache import (
    CacheDecodeError,
    CacheEntry,
    CacheError,
    CacheExpiredError,
    CacheInvalidationError,
    CacheMiss,
    cache_key,
    get_cache,
    invalidate_cache,
    set_cache,
)
from dbcli.core.settings import (
    ConfigDocument,
    SettingsDocument,
    SettingsError,
    SupportsDelete,
)

__all__ = [
    # Cache
    "CacheDecodeError",
    "CacheEntry",
    "CacheError",
    "CacheExpiredError",
    "CacheInvalidationError",
    "CacheMiss",
    "cache_key",
    "get_cache",
    "invalidate_cache",
    "set_cache",
    # Settings
    "ConfigDocument",
    "SettingsDocument",
    "SettingsError",
    "SupportsDelete",
]
