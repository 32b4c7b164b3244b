"""
Loading strategies and data provenance.

Each `EventLoader.load()` call picks one strategy:

- ``cache-first``: cache if present (refresh in background when stale), else network
- ``api-first``:   network, falling back to cache on failure
- ``cache-only``:  cache or nothing (offline mode)
- ``api-only``:    network only, still writing through to the cache
"""

from __future__ import annotations

from enum import Enum


class LoadStrategy(str, Enum):
    """How one load call balances the cache against the remote source."""

    CACHE_FIRST = "cache-first"
    API_FIRST = "api-first"
    CACHE_ONLY = "cache-only"
    API_ONLY = "api-only"


class DataSource(str, Enum):
    """Where the events of a `LoadResult` came from."""

    CACHE = "cache"
    NETWORK = "network"


DEFAULT_STRATEGY = LoadStrategy.CACHE_FIRST


__all__ = ["DEFAULT_STRATEGY", "DataSource", "LoadStrategy"]
