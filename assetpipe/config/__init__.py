"""
assetpipe Configuration

Typed asset configuration with defaults.
"""

from .schemas import DEFAULT_SOURCES, AssetConfig, CachingConfig, RawCopyEntry, resolve_config

__all__ = [
    "AssetConfig",
    "CachingConfig",
    "RawCopyEntry",
    "DEFAULT_SOURCES",
    "resolve_config",
]
