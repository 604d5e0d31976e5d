"""
Host site for assetpipe.

A Site is the minimum the environment needs from a static-site build:
where sources live, where output goes, whether safe mode is on, the
raw host config (whose `assets` key feeds the Env) and the hook
registry the host fires around rendering.

Usage:
    site = Site.from_config_file("_config.yml")
    env = Env(site)
    payload = site.render({"page": {...}})
    payload["assets"]["app.js"].url
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .errors import ConfigurationError
from .hooks import HookRegistry

if TYPE_CHECKING:
    from .env import Env

logger = logging.getLogger(__name__)

DEFAULT_DESTINATION = "_site"


@dataclass
class Site:
    """
    Static site being built.

    Attributes:
        source: Site root; asset sources resolve against it
        destination: Build output directory
        config: Host config mapping (the `assets` key is read by the Env)
        safe: Safe mode; disables processors that run embedded code
        hooks: Hook registry shared by the site and its Env
        assets_env: Set by the Env during initialization
    """

    source: Path
    destination: Path | None = None
    config: dict[str, Any] = field(default_factory=dict)
    safe: bool = False
    hooks: HookRegistry = field(default_factory=HookRegistry)
    assets_env: Env | None = None

    def __post_init__(self) -> None:
        self.source = Path(self.source).resolve()
        if self.destination is None:
            self.destination = self.source / DEFAULT_DESTINATION
        self.destination = Path(self.destination)
        if not self.destination.is_absolute():
            self.destination = self.source / self.destination

    @classmethod
    def from_config_file(cls, path: str | Path, *, safe: bool | None = None) -> Site:
        """
        Load a site from a YAML config file.

        Recognised keys: `source` (default: the file's directory),
        `destination` (default: `_site`), `safe` and `assets`.

        Args:
            path: Path to `_config.yml`
            safe: Override the file's `safe` value

        Raises:
            ConfigurationError: If the file does not hold a mapping
            yaml.YAMLError: If the file is not valid YAML
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"{path} must hold a mapping, got {type(config).__name__}")

        source = path.parent / config.get("source", ".")
        destination = config.get("destination", DEFAULT_DESTINATION)
        logger.debug(f"[site] loaded config from {path}")
        return cls(
            source=source,
            destination=Path(source).resolve() / destination,
            config=config,
            safe=bool(config.get("safe", False)) if safe is None else safe,
        )

    def in_source_dir(self, *parts: str) -> Path:
        return self.source.joinpath(*parts)

    def in_dest_dir(self, *parts: str) -> Path:
        return self.destination.joinpath(*(p.lstrip("/") for p in parts))

    def render(self, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Fire site:pre_render and return the payload the hooks filled in.

        Call once per page render; hooks rebuild their data each time.
        """
        payload = {} if payload is None else payload
        self.hooks.trigger("site", "pre_render", self, payload)
        return payload
