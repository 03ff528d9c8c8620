"""Cached API data used by the CLI.

Each accessor pins a logical key and TTL on top of the generic cache in
``dbcli.core.cache``. Readers return None (or an empty region) on any kind
of miss: a key that was never set, an expired entry and a malformed value
all look the same here. Invalidation failures are logged and dropped.
"""

import logging
from typing import Dict, List, Optional, Tuple

from dbcli.core.cache import (
    CacheError,
    CacheMiss,
    get_cache,
    invalidate_cache,
    set_cache,
)
from dbcli.core.settings import ConfigDocument

logger = logging.getLogger(__name__)

DB_NAMES_CACHE_KEY = "database_names"
DB_NAMES_CACHE_TTL_SECONDS = 30 * 60

REGIONS_CACHE_KEY = "locations"
DEFAULT_REGION_CACHE_KEY = "defaultLocation"
REGIONS_CACHE_TTL_SECONDS = 8 * 60 * 60


def _invalidate_quietly(store: ConfigDocument, key: str) -> None:
    try:
        invalidate_cache(store, key)
    except CacheError as e:
        logger.warning("Failed to invalidate cache entry %s: %s", key, e)


def set_db_names_cache(store: ConfigDocument, db_names: List[str]) -> None:
    set_cache(store, DB_NAMES_CACHE_KEY, DB_NAMES_CACHE_TTL_SECONDS, list(db_names))


def get_db_names_cache(store: ConfigDocument) -> Optional[List[str]]:
    """Return the cached database names, or None on a miss."""
    try:
        return get_cache(store, DB_NAMES_CACHE_KEY, List[str])
    except CacheMiss as e:
        logger.debug("Database names cache miss: %s", e)
        return None


def invalidate_db_names_cache(store: ConfigDocument) -> None:
    _invalidate_quietly(store, DB_NAMES_CACHE_KEY)


def set_locations_cache(
    store: ConfigDocument, locations: Dict[str, str], closest: str
) -> None:
    """Cache the region map and the closest region.

    The two values are written as separate entries.
    """
    set_cache(store, REGIONS_CACHE_KEY, REGIONS_CACHE_TTL_SECONDS, dict(locations))
    set_cache(store, DEFAULT_REGION_CACHE_KEY, REGIONS_CACHE_TTL_SECONDS, closest)


def get_locations_cache(store: ConfigDocument) -> Tuple[Optional[Dict[str, str]], str]:
    """Return ``(locations, closest_region)`` from the cache.

    Both entries must be fresh; if either one misses the result is
    ``(None, "")``.
    """
    try:
        locations = get_cache(store, REGIONS_CACHE_KEY, Dict[str, str])
        closest = get_cache(store, DEFAULT_REGION_CACHE_KEY, str)
    except CacheMiss as e:
        logger.debug("Locations cache miss: %s", e)
        return None, ""
    return locations, closest


def invalidate_locations_cache(store: ConfigDocument) -> None:
    _invalidate_quietly(store, REGIONS_CACHE_KEY)
    _invalidate_quietly(store, DEFAULT_REGION_CACHE_KEY)
