"""
Cache backend selection.

| enabled | type     | backend             |
|---------|----------|---------------------|
| false   | any      | NullStore           |
| true    | "memory" | MemoryStore         |
| true    | "file"   | FileStore(cache_dir)|
| true    | other    | ConfigurationError  |
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from assetpipe.errors import ConfigurationError

from .cache import Cache
from .stores import CacheStore, FileStore, MemoryStore, NullStore

if TYPE_CHECKING:
    from assetpipe.config import CachingConfig

logger = logging.getLogger(__name__)

CACHE_TYPES = ("memory", "file")


def create_store(caching: CachingConfig, cache_dir: str | Path) -> CacheStore:
    """
    Pick the store for a caching config.

    Raises:
        ConfigurationError: If caching is enabled with an unknown type
    """
    if not caching.enabled:
        return NullStore()
    if caching.type == "memory":
        return MemoryStore()
    if caching.type == "file":
        return FileStore(cache_dir)
    raise ConfigurationError(
        f"Unsupported cache type {caching.type!r}. Expected one of: {', '.join(CACHE_TYPES)}",
        key="caching.type",
    )


def create_cache(
    caching: CachingConfig,
    cache_dir: str | Path,
    log: logging.Logger | None = None,
) -> Cache:
    """Build the logging Cache around the configured store."""
    store = create_store(caching, cache_dir)
    logger.debug(f"[cache] using {store!r}")
    return Cache(store, log=log)
