"""
Asset Environment for assetpipe.

The Env is the single entry point a host site uses for assets. Building
one runs the whole initialization sequence for a build:

    CREATED
      -> CONFIG_RESOLVED      asset config read from site.config["assets"]
      -> HOOKS_BEFORE_INIT    env:before_init hooks (may edit the config)
      -> BASE_INITIALIZED     search paths, processors, compiler, manifest
      -> SAFE_MODE_APPLIED    dynamic processors removed if site.safe
      -> SOURCES_REGISTERED   configured sources added to the search paths
      -> DROPS_HOOKED         site:pre_render hook registered (deferred)
      -> PRECOMPILED          precompile targets compiled into the manifest
      -> RAW_COPIED           raw_precompile files copied to the destination
      -> READY                env:after_init hooks have run

Any exception aborts the sequence and propagates; the instance stays in
the state it reached and must not be used. An Env is built once per
build; calling __init__ again raises EnvironmentStateError.

The cache is not part of the sequence. It is built on first access
(the precompile step is always its first user).

Usage:
    site = Site(source="site/", config={"assets": {"precompile": ["app.js"]}})
    env = Env(site)
    env.manifest.assets         # {"app.js": "app-<sha256>.js"}
    site.render({})["assets"]   # {"app.js": AssetDrop(...), ...}
"""

from __future__ import annotations

import logging
import shutil
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .cache import Cache, create_cache
from .compiler import AssetCompiler
from .config import RawCopyEntry, resolve_config
from .drop import AssetDrop
from .errors import AssetNotFoundError, EnvironmentStateError
from .manifest import Manifest, ManifestEntry
from .processors import Processor, ProcessorRegistry, default_compressors, default_transformers

if TYPE_CHECKING:
    from .hooks import HookRegistration, HookRegistry
    from .site import Site

logger = logging.getLogger(__name__)

GLOB_CHARS = "*"


class EnvState(str, Enum):
    """Initialization states, in order."""

    CREATED = "created"
    CONFIG_RESOLVED = "config_resolved"
    HOOKS_BEFORE_INIT = "hooks_before_init"
    BASE_INITIALIZED = "base_initialized"
    SAFE_MODE_APPLIED = "safe_mode_applied"
    SOURCES_REGISTERED = "sources_registered"
    DROPS_HOOKED = "drops_hooked"
    PRECOMPILED = "precompiled"
    RAW_COPIED = "raw_copied"
    READY = "ready"


@dataclass(frozen=True)
class RawCopySpec:
    """A raw file and where it is copied to."""

    source: Path
    destination: Path

    @property
    def is_directory_target(self) -> bool:
        """A destination without a suffix is a directory."""
        return not self.destination.suffix

    @property
    def target(self) -> Path:
        """The file that exists after the copy."""
        if self.is_directory_target:
            return self.destination / self.source.name
        return self.destination


def is_glob(target: str) -> bool:
    return any(c in target for c in GLOB_CHARS)


class Env:
    """
    Asset environment for one site build.

    Attributes:
        site: Host site
        hooks: Hook registry (the site's unless one is passed in)
        asset_config: Resolved AssetConfig
        paths: Ordered, duplicate-free search paths
        processors: Per-Env transformers and compressors
        compiler: Compiles single assets
        manifest: Compiled-asset record
    """

    def __init__(
        self,
        site: Site,
        *,
        hooks: HookRegistry | None = None,
        compiler: AssetCompiler | None = None,
    ):
        if getattr(self, "_state", None) is not None:
            raise EnvironmentStateError(
                f"Env already initialized (state={self._state.value}); build a new Env instead"
            )
        self._state = EnvState.CREATED
        self.site = site
        self.hooks = hooks if hooks is not None else site.hooks

        self.asset_config = resolve_config(site.config.setdefault("assets", {}))
        self._advance(EnvState.CONFIG_RESOLVED)

        self._trigger("before_init")
        self._advance(EnvState.HOOKS_BEFORE_INIT)

        self.paths: list[Path] = []
        self.processors = ProcessorRegistry()
        for processor in default_transformers():
            self.processors.register_transformer(processor)
        self._cache: Cache | None = None
        self._cache_lock = threading.Lock()
        self._drops_registration: HookRegistration | None = None
        self.compiler = compiler if compiler is not None else AssetCompiler(self)
        self.manifest = Manifest(self, self.in_dest_dir())
        self._attach_to_site()
        self.enable_compression()
        self._advance(EnvState.BASE_INITIALIZED)

        self.disable_dynamic_processors()
        self._advance(EnvState.SAFE_MODE_APPLIED)

        self.setup_sources()
        self._advance(EnvState.SOURCES_REGISTERED)

        self.setup_drops()
        self._advance(EnvState.DROPS_HOOKED)

        self.precompile()
        self._advance(EnvState.PRECOMPILED)

        self.copy_raw()
        self._advance(EnvState.RAW_COPIED)

        self._trigger("after_init")
        self._advance(EnvState.READY)

    # ==================== State ====================

    @property
    def state(self) -> EnvState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is EnvState.READY

    def _advance(self, state: EnvState) -> None:
        self._state = state
        logger.debug(f"[assets] env state -> {state.value}")

    def _trigger(self, event: str) -> None:
        logger.debug(f"[assets] calling hooks for env, {event}")
        self.hooks.trigger("env", event, self)

    def _attach_to_site(self) -> None:
        previous = self.site.assets_env
        if previous is not None and previous is not self:
            previous.detach()
        self.site.assets_env = self

    def detach(self) -> None:
        """Remove this Env's render hook from the site (a newer Env replaced it)."""
        if self._drops_registration is not None:
            self.hooks.unregister(self._drops_registration)
            self._drops_registration = None

    # ==================== Paths & options ====================

    @property
    def skip_gzip(self) -> bool:
        return not self.asset_config.gzip

    @property
    def cache_dir(self) -> Path:
        return self.site.in_source_dir(self.asset_config.caching.path)

    def in_dest_dir(self, *parts: str) -> Path:
        """Path under the compiled-assets directory of the site destination."""
        return self.site.in_dest_dir(self.asset_config.destination, *parts)

    # ==================== Cache ====================

    @property
    def cache(self) -> Cache:
        """
        The Env's cache, built on first access.

        Raises:
            ConfigurationError: If caching is enabled with an unknown type
        """
        if self._cache is None:
            with self._cache_lock:
                if self._cache is None:
                    self._cache = create_cache(self.asset_config.caching, self.cache_dir)
        return self._cache

    # ==================== Processors ====================

    def enable_compression(self) -> list[Processor]:
        """Register output compressors when `compression` is on."""
        if not self.asset_config.compression:
            return []
        compressors = default_compressors()
        for compressor in compressors:
            self.processors.register_compressor(compressor)
        return compressors

    def disable_dynamic_processors(self) -> list[Processor]:
        """
        In safe mode, remove every processor that runs embedded code.

        Returns:
            The removed processors (empty outside safe mode)
        """
        if not self.site.safe:
            return []
        removed = self.processors.remove_dynamic()
        if removed:
            names = ", ".join(p.name for p in removed)
            logger.info(f"[assets] safe mode: disabled {names}")
        return removed

    # ==================== Sources ====================

    def setup_sources(self) -> list[Path]:
        """
        Append configured source directories to the search paths.

        Each entry resolves against the site source. Entries outside the
        current working directory are skipped. Re-registering a path that
        is already present does nothing.

        Returns:
            The search paths after registration
        """
        cwd = Path.cwd().resolve()
        for source in self.asset_config.sources:
            path = self.site.in_source_dir(source).resolve()
            if not path.is_relative_to(cwd):
                logger.debug(f"[assets] skipping source outside {cwd}: {path}")
                continue
            if path not in self.paths:
                self.paths.append(path)
        return list(self.paths)

    def each_file(self) -> Iterator[tuple[Path, Path]]:
        """Yield (search path, file) for every file, search paths in order."""
        for base in self.paths:
            if not base.is_dir():
                continue
            for path in sorted(base.rglob("*")):
                if path.is_file():
                    yield base, path

    def glob_paths(self, pattern: str) -> list[str]:
        """
        Expand a glob against every search path.

        Search paths are visited in registration order and matches within
        a path in lexical order. A relative path matched in more than one
        search path is listed once.

        Returns:
            Matching logical paths (possibly empty)
        """
        seen: set[str] = set()
        found: list[str] = []
        for base in self.paths:
            if not base.is_dir():
                continue
            matches = sorted(p.relative_to(base).as_posix() for p in base.glob(pattern) if p.is_file())
            for match in matches:
                if match not in seen:
                    seen.add(match)
                    found.append(match)
        return found

    def find_file(self, logical_path: str) -> Path | None:
        """Exact file lookup, later search paths first. No processor suffixes."""
        for base in reversed(self.paths):
            candidate = base / logical_path
            if candidate.is_file() and candidate.resolve().is_relative_to(base):
                return candidate
        return None

    # ==================== Template payload ====================

    def to_template_payload(self) -> dict[str, AssetDrop]:
        """
        Map every servable file to a drop, keyed by its relative path.

        Files with any path segment starting with "_" are partials and are
        left out. When two search paths hold the same relative path, the
        later-registered one wins.
        """
        payload: dict[str, AssetDrop] = {}
        for base, path in self.each_file():
            relative = path.relative_to(base)
            if any(part.startswith("_") for part in relative.parts):
                continue
            key = relative.as_posix()
            payload[key] = AssetDrop(key, self.site)
        return payload

    def setup_drops(self) -> None:
        """Register the site:pre_render hook that publishes the payload (once)."""
        if self._drops_registration is not None:
            return

        def attach_assets(site: Site, payload: dict) -> None:
            payload["assets"] = self.to_template_payload()

        self._drops_registration = self.hooks.register("site", "pre_render", attach_assets)

    # ==================== Precompile ====================

    def precompile(self) -> list[ManifestEntry]:
        """
        Compile every configured precompile target into the manifest.

        Literal targets compile exactly one asset and fail with
        AssetNotFoundError if it is missing. Glob targets compile every
        match; no match is fine.

        Returns:
            Manifest entries in target order
        """
        # selects the backend, rejecting a bad cache type before any compile
        cache = self.cache
        logger.debug(f"[assets] precompiling with {cache!r}")

        entries: list[ManifestEntry] = []
        for target in self.asset_config.precompile:
            if not is_glob(target):
                entries.append(self.manifest.compile(target))
                continue

            matches = self._glob_targets(target)
            if not matches:
                logger.debug(f"[assets] precompile glob matched nothing: {target}")
            entries.extend(self._compile_all(matches))

        if entries:
            self.manifest.save()
            logger.info(f"[assets] precompiled {len(entries)} asset(s)")
        return entries

    def _glob_targets(self, pattern: str) -> list[str]:
        """
        Glob matches as the logical paths they compile to.

        `app.js` and `app.js.j2` both compile to `app.js`; it is listed
        once, at the position of its first match.
        """
        targets: list[str] = []
        for match in self.glob_paths(pattern):
            output = self.compiler.output_path(match)
            if output not in targets:
                targets.append(output)
        return targets

    def _compile_all(self, logical_paths: list[str]) -> list[ManifestEntry]:
        workers = self.asset_config.workers
        if workers <= 1 or len(logical_paths) <= 1:
            return [self.manifest.compile(p) for p in logical_paths]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="assetpipe") as pool:
            written = list(pool.map(self.manifest.write, logical_paths))
        return [self.manifest.add(entry) for entry in written]

    # ==================== Raw copy ====================

    def _raw_sources(self, pattern: str) -> list[tuple[str, Path]]:
        if is_glob(pattern):
            found = [(p, self.find_file(p)) for p in self.glob_paths(pattern)]
            return [(p, source) for p, source in found if source is not None]
        source = self.find_file(pattern)
        if source is None:
            raise AssetNotFoundError(pattern, searched=list(self.paths))
        return [(pattern, source)]

    def raw_precompiles(self) -> list[RawCopySpec]:
        """
        Resolve raw_precompile entries into copy specs.

        A string entry copies each matching file to the same relative
        path under the compiled-assets directory. A {source, destination}
        entry copies to `destination` under the site destination.

        Raises:
            AssetNotFoundError: A literal source does not exist
        """
        specs: list[RawCopySpec] = []
        for item in self.asset_config.raw_precompile:
            if isinstance(item, RawCopyEntry):
                destination = self.site.in_dest_dir(item.destination)
                for _, source in self._raw_sources(item.source):
                    specs.append(RawCopySpec(source=source, destination=destination))
            else:
                for logical, source in self._raw_sources(item):
                    specs.append(RawCopySpec(source=source, destination=self.in_dest_dir(logical)))
        return specs

    def copy_raw(self, specs: list[RawCopySpec] | None = None) -> list[Path]:
        """
        Copy raw files to their destinations.

        A destination without a suffix is a directory: it is created and
        the file copied into it. Otherwise the parent is created and the
        file copied to that path, replacing any existing file.

        Returns:
            The written files

        Raises:
            AssetNotFoundError: A source file is missing
        """
        specs = self.raw_precompiles() if specs is None else specs
        copied: list[Path] = []
        for spec in specs:
            if not spec.source.is_file():
                raise AssetNotFoundError(spec.source)
            if spec.is_directory_target:
                spec.destination.mkdir(parents=True, exist_ok=True)
            else:
                spec.destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(spec.source, spec.target)
            copied.append(spec.target)

        if copied:
            logger.info(f"[assets] copied {len(copied)} raw asset(s)")
        return copied

    def __repr__(self) -> str:
        paths = len(getattr(self, "paths", []))
        return f"Env(state={self._state.value}, paths={paths})"
