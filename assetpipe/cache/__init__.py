"""
assetpipe Cache

Cache backends for compiled asset output and the logging wrapper
that fronts them.
"""

from .cache import Cache
from .factory import CACHE_TYPES, create_cache, create_store
from .stores import CacheStore, FileStore, MemoryStore, NullStore

__all__ = [
    "Cache",
    "CacheStore",
    "MemoryStore",
    "FileStore",
    "NullStore",
    "CACHE_TYPES",
    "create_cache",
    "create_store",
]
