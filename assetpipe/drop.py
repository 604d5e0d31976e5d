"""
Template drop for a single asset.

An AssetDrop binds an asset's relative path to the host site so a
template can ask about it (`assets["app.js"].url`) without touching
the Env directly. Lookups are lazy; building a drop costs nothing.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .site import Site

_KEYS = (
    "path",
    "basename",
    "extname",
    "content_type",
    "url",
    "filename",
    "output_path",
    "digest_path",
)


class AssetDrop:
    """Read-only view of one asset for the templating layer."""

    def __init__(self, path: str | PurePosixPath, site: Site):
        self._path = PurePosixPath(path)
        self.site = site

    @property
    def path(self) -> str:
        return str(self._path)

    @property
    def basename(self) -> str:
        return self._path.name

    @property
    def extname(self) -> str:
        return self._path.suffix

    @property
    def content_type(self) -> str | None:
        return mimetypes.guess_type(PurePosixPath(self.output_path).name)[0]

    @property
    def output_path(self) -> str:
        """Logical path this file compiles to (`app.js.j2` -> `app.js`)."""
        env = self.site.assets_env
        return env.compiler.output_path(self.path) if env is not None else self.path

    @property
    def digest_path(self) -> str | None:
        """Output path from the manifest, if this asset was precompiled."""
        env = self.site.assets_env
        if env is None:
            return None
        entry = env.manifest.find(self.output_path)
        return entry.digest_path if entry else None

    @property
    def url(self) -> str:
        env = self.site.assets_env
        prefix = env.asset_config.destination if env is not None else "/assets"
        return f"{prefix.rstrip('/')}/{self.digest_path or self.output_path}"

    @property
    def filename(self) -> Path | None:
        """Source file the path resolves to in the search paths."""
        env = self.site.assets_env
        return env.compiler.find(self.path) if env is not None else None

    def __getitem__(self, key: str) -> Any:
        if key not in _KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return key in _KEYS

    def to_dict(self) -> dict[str, Any]:
        return {key: self[key] for key in _KEYS if key != "filename"}

    def __str__(self) -> str:
        return self.url

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssetDrop):
            return NotImplemented
        return self._path == other._path and self.site is other.site

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"AssetDrop(path='{self.path}')"
