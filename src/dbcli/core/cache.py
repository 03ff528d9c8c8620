"""TTL cache stored inside the settings document.

Cached API data (database names, regions, ...) lives under the ``cache``
table of the settings document, one ``CacheEntry`` per logical key:

    {
        "cache": {
            "database_names": {"expiration": 1700000000, "data": ["db1", "db2"]}
        }
    }

An expiration of 0 means the entry never expires. An entry whose expiration
equals the current second is still fresh; it expires once the clock moves
past it.

The store is always passed explicitly; any object implementing
``ConfigDocument`` works. Stores that also implement ``SupportsDelete`` get
a targeted delete on invalidation, others fall back to rewriting the whole
document from a snapshot.
"""

import json
import logging
import time
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from dbcli.core.settings import (
    ConfigDocument,
    SettingsError,
    SupportsDelete,
    pop_path,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_NAMESPACE = "cache"


class CacheEntry(BaseModel, Generic[T]):
    """A cached value and its absolute expiration (unix seconds, 0 = never)."""

    expiration: int = 0
    data: T

    def is_expired(self, now: Optional[int] = None) -> bool:
        if self.expiration == 0:
            return False
        if now is None:
            now = _now()
        return self.expiration < now


class CacheError(Exception):
    """Base class for cache errors."""

    def __init__(self, message: str, key: str):
        super().__init__(message)
        self.key = key


class CacheMiss(CacheError):
    """No usable cached value for a key.

    ``data`` is whatever could be recovered from the store. It is None for
    decode failures and the stale value for expired entries; never use it
    as a cache hit.
    """

    def __init__(self, message: str, key: str, data: Any = None):
        super().__init__(message, key)
        self.data = data


class CacheDecodeError(CacheMiss):
    """The key is absent or its stored value does not match the expected shape."""


class CacheExpiredError(CacheMiss):
    """The entry exists but is past its expiration."""

    def __init__(self, key: str, data: Any, expiration: int):
        super().__init__(f"cache entry expired: {key}", key, data)
        self.expiration = expiration


class CacheInvalidationError(CacheError):
    """The settings document could not be rewritten without the key."""


def _now() -> int:
    return int(time.time())


def cache_key(key: str) -> str:
    """Namespace a logical key under the cache table."""
    return f"{CACHE_NAMESPACE}.{key}"


def set_cache(store: ConfigDocument, key: str, ttl: int, value: T) -> CacheEntry[T]:
    """Store a value under a logical key.

    Args:
        store: Settings document to write to.
        key: Logical cache key (without the ``cache.`` prefix).
        ttl: Time to live in seconds; 0 or less never expires.
        value: JSON-serializable value to cache.

    Returns:
        The entry that was written.
    """
    entry: CacheEntry[Any] = CacheEntry(data=value)
    if ttl > 0:
        entry.expiration = _now() + ttl
    store.set(cache_key(key), entry.model_dump(mode="json"))
    logger.debug("Cache set: %s (TTL: %ss)", key, ttl)
    return entry


def get_cache(store: ConfigDocument, key: str, data_type: Type[T]) -> T:
    """Read a fresh cached value.

    Args:
        store: Settings document to read from.
        key: Logical cache key.
        data_type: Expected type of the cached data, e.g. ``List[str]``.

    Returns:
        The cached data.

    Raises:
        CacheDecodeError: The key is missing or has the wrong shape.
        CacheExpiredError: The entry is stale; the stale data is attached.
    """
    raw = store.get(cache_key(key))
    try:
        entry = CacheEntry[data_type].model_validate(raw)  # type: ignore[valid-type]
    except ValidationError as e:
        raise CacheDecodeError(f"failed to get cache data for {key}", key) from e

    if entry.is_expired():
        raise CacheExpiredError(key, entry.data, entry.expiration)

    return entry.data


def invalidate_cache(store: ConfigDocument, key: str) -> None:
    """Remove a logical key from the cache.

    Uses the store's ``delete`` when available. Otherwise the whole document
    is snapshotted, the key removed from the snapshot, and the store reloaded
    from the serialized snapshot; writes made to the store between the
    snapshot and the reload are lost.

    Raises:
        CacheInvalidationError: The snapshot could not be serialized or the
            store refused to reload it.
    """
    namespaced = cache_key(key)

    if isinstance(store, SupportsDelete):
        store.delete(namespaced)
        logger.debug("Cache invalidated: %s", key)
        return

    settings = store.all_settings()
    if namespaced in settings:
        del settings[namespaced]
    else:
        pop_path(settings, namespaced)

    try:
        encoded = json.dumps(settings, indent=1)
    except (TypeError, ValueError) as e:
        raise CacheInvalidationError(
            f"failed to serialize settings while invalidating {key}: {e}", key
        ) from e

    try:
        store.read_config(encoded)
    except (SettingsError, ValueError) as e:
        raise CacheInvalidationError(
            f"failed to reload settings while invalidating {key}: {e}", key
        ) from e

    logger.debug("Cache invalidated by rewrite: %s", key)


def list_cache_entries(store: ConfigDocument) -> Dict[str, CacheEntry[Any]]:
    """Return every well-formed entry in the cache table, by logical key.

    Malformed values are skipped.
    """
    table = store.get(CACHE_NAMESPACE)
    if not isinstance(table, dict):
        return {}

    entries: Dict[str, CacheEntry[Any]] = {}
    for key, raw in table.items():
        try:
            entries[key] = CacheEntry[Any].model_validate(raw)
        except ValidationError:
            logger.debug("Skipping malformed cache entry: %s", key)
    return entries


def get_stats(store: ConfigDocument) -> Dict[str, Any]:
    """Summarize the cache table.

    Returns:
        Dict with entry counts and per-key expiration details.
    """
    now = _now()
    entries = list_cache_entries(store)
    details = {}
    expired = 0

    for key, entry in sorted(entries.items()):
        is_expired = entry.is_expired(now)
        if is_expired:
            expired += 1
        details[key] = {
            "expiration": entry.expiration,
            "expires_in": entry.expiration - now if entry.expiration else None,
            "expired": is_expired,
        }

    return {
        "total_entries": len(entries),
        "active_entries": len(entries) - expired,
        "expired_entries": expired,
        "entries": details,
    }


def cleanup_expired(store: ConfigDocument) -> int:
    """Invalidate every expired entry.

    Returns:
        Number of entries removed.
    """
    now = _now()
    removed = 0
    for key, entry in list_cache_entries(store).items():
        if entry.is_expired(now):
            invalidate_cache(store, key)
            removed += 1

    if removed:
        logger.info("Cleaned up %d expired cache entries", removed)
    return removed


def clear_cache(store: ConfigDocument) -> int:
    """Invalidate every entry in the cache table, fresh or not.

    Returns:
        Number of entries removed.
    """
    table = store.get(CACHE_NAMESPACE)
    if not isinstance(table, dict):
        return 0

    for key in table:
        invalidate_cache(store, key)

    logger.info("Cache cleared: %d entries deleted", len(table))
    return len(table)
