"""
Configuration Schemas for assetpipe.

Pydantic models for the `assets` section of the host site config.

Every recognised key has a default, so an empty or partial mapping
resolves to a usable config. Unknown keys are preserved (extra="allow")
but nothing reads them. Only the shape of a value is checked here, and
a wrongly shaped value raises ConfigurationError. Whether a value is
supported is decided where it is used: `caching.type` is a free string
and only the cache factory accepts or rejects it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assetpipe.errors import ConfigurationError

DEFAULT_SOURCES = [
    "assets/css",
    "assets/fonts",
    "assets/images",
    "assets/videos",
    "assets/javascript",
    "assets/js",
    "assets/img",
    "_assets/css",
    "_assets/fonts",
    "_assets/images",
    "_assets/videos",
    "_assets/javascript",
    "_assets/js",
    "_assets/img",
]


class CachingConfig(BaseModel):
    """Cache backend selection."""

    enabled: bool = Field(True, description="Cache compiled output")
    type: str | None = Field("file", description="Backend: 'memory' or 'file'")
    path: str = Field(".asset-cache", description="FileStore directory, relative to the site root")

    model_config = ConfigDict(extra="allow")


class RawCopyEntry(BaseModel):
    """Explicit raw copy: a source (literal or glob) and a destination."""

    source: str
    destination: str

    model_config = ConfigDict(extra="allow")


class AssetConfig(BaseModel):
    """
    Asset pipeline configuration.

    Read from the `assets` key of the host config. Later init phases
    may adjust the Env around it, but this object stays the single
    source of configuration for one build.
    """

    gzip: bool = Field(False, description="Write a .gz twin next to each compiled file")
    compression: bool = Field(True, description="Minify compiled CSS and JS")
    caching: CachingConfig = Field(default_factory=CachingConfig)
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    precompile: list[str] = Field(default_factory=list)
    raw_precompile: list[str | RawCopyEntry] = Field(default_factory=list)
    destination: str = Field("/assets", description="Output prefix under the site destination")
    digest: bool = Field(True, description="Fingerprint compiled filenames")
    workers: int = Field(1, ge=1, description="Thread pool size for glob compiles")

    model_config = ConfigDict(extra="allow")


def resolve_config(raw: Mapping[str, Any] | None = None) -> AssetConfig:
    """
    Normalize user asset options into an AssetConfig.

    Nested `caching` options are merged over the caching defaults, so
    `{"caching": {"type": "memory"}}` keeps caching enabled.

    Args:
        raw: The `assets` mapping from the host config (may be None)

    Returns:
        AssetConfig with defaults filled in

    Raises:
        ConfigurationError: If a value has the wrong shape, e.g. a string
            where a list of sources is expected
    """
    if raw is not None and not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"Asset options must be a mapping, got {type(raw).__name__}", key="assets"
        )
    options = dict(raw or {})
    caching = options.get("caching")
    if isinstance(caching, Mapping):
        options["caching"] = {**CachingConfig().model_dump(), **caching}
    elif isinstance(caching, bool):
        # `caching: false` is shorthand for disabling the cache
        options["caching"] = {"enabled": caching}
    elif caching is None:
        options.pop("caching", None)
    try:
        return AssetConfig.model_validate(options)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"]) or None
        raise ConfigurationError(f"Invalid asset option: {error['msg']}", key=key) from e
