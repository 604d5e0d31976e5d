"""
Manifest of compiled assets.

The manifest compiles logical paths through the Env's compiler, writes
the output (fingerprinted when `digest` is on) under the assets
directory, and records each logical path against its output file.
save() writes the record as `.manifest.json`:

    {
        "files": {"app-3f2a...js": {"logical_path": "app.js", ...}},
        "assets": {"app.js": "app-3f2a...js"}
    }
"""

from __future__ import annotations

import gzip
import json
import logging
import threading
from dataclasses import asdict, dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .env import Env

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = ".manifest.json"


@dataclass(frozen=True)
class ManifestEntry:
    """One compiled asset."""

    logical_path: str
    digest_path: str
    digest: str
    size: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Manifest:
    """
    Compiled-asset record for one Env.

    write() may run from several threads at once; add() records entries
    under a lock, in whatever order the caller chooses.
    """

    def __init__(self, env: Env, directory: str | Path):
        self.env = env
        self.directory = Path(directory)
        self._entries: dict[str, ManifestEntry] = {}
        self._lock = threading.Lock()

    @property
    def entries(self) -> list[ManifestEntry]:
        """Entries in the order they were added."""
        return list(self._entries.values())

    @property
    def assets(self) -> dict[str, str]:
        """Logical path -> output path."""
        return {e.logical_path: e.digest_path for e in self._entries.values()}

    @property
    def path(self) -> Path:
        return self.directory / MANIFEST_FILENAME

    def find(self, logical_path: str) -> ManifestEntry | None:
        return self._entries.get(logical_path)

    def _output_name(self, logical_path: str, digest: str) -> str:
        if not self.env.asset_config.digest:
            return logical_path
        path = PurePosixPath(logical_path)
        return str(path.with_name(f"{path.stem}-{digest}{path.suffix}"))

    def write(self, logical_path: str) -> ManifestEntry:
        """
        Compile an asset and write its output, without recording it.

        Raises:
            AssetNotFoundError: From the compiler
            CompileError: From the compiler
        """
        asset = self.env.compiler.compile(logical_path)
        digest = asset.digest
        entry = ManifestEntry(
            logical_path=asset.logical_path,
            digest_path=self._output_name(asset.logical_path, digest),
            digest=digest,
            size=asset.size,
            source=str(asset.source),
        )

        target = self.directory / entry.digest_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(asset.data)
        if not self.env.skip_gzip:
            gz_target = target.with_name(target.name + ".gz")
            gz_target.write_bytes(gzip.compress(asset.data, mtime=0))
        return entry

    def add(self, entry: ManifestEntry) -> ManifestEntry:
        """Record a written entry and fire asset:after_compile."""
        with self._lock:
            self._entries[entry.logical_path] = entry

        logger.info(f"[manifest] wrote {entry.logical_path} -> {entry.digest_path}")
        self.env.hooks.trigger("asset", "after_compile", self.env, entry)
        return entry

    def compile(self, logical_path: str) -> ManifestEntry:
        """
        Compile, write and record one asset.

        Args:
            logical_path: Literal path relative to the search paths

        Returns:
            The manifest entry

        Raises:
            AssetNotFoundError: From the compiler
            CompileError: From the compiler
        """
        return self.add(self.write(logical_path))

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": {
                e.digest_path: {
                    "logical_path": e.logical_path,
                    "digest": e.digest,
                    "size": e.size,
                }
                for e in self._entries.values()
            },
            "assets": self.assets,
        }

    def save(self) -> Path:
        """Write .manifest.json and return its path."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.debug(f"[manifest] saved {len(self._entries)} entries to {self.path}")
        return self.path

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Manifest(directory='{self.directory}', entries={len(self._entries)})"
