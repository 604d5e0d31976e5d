"""
Asset Compiler for assetpipe.

The compiler turns a logical path ("app.js", "images/logo.png") into
compiled bytes:

1. Locate the source in the Env's search paths. Later-registered paths
   are searched first. A logical path matches either the exact file or
   the file plus a transformer suffix (`app.js` -> `app.js.j2`).
2. Run the transformers named by the source's suffixes, right to left.
3. Run the compressor for the output suffix, if compression is on.

Output of static chains is stored through Env.cache, keyed by source
path, mtime, size and processor chain. Chains with a dynamic processor
are rebuilt every time since their output depends on more than the file.

This is deliberately small. It does not resolve dependencies between
assets and can be swapped for another object with the same compile(),
find() and output_path() methods.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import AssetNotFoundError, CompileError
from .processors import Processor, ProcessorContext

if TYPE_CHECKING:
    from .env import Env

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledAsset:
    """Compiled output for one logical path."""

    logical_path: str
    source: Path
    data: bytes

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.data).hexdigest()

    @property
    def size(self) -> int:
        return len(self.data)


class AssetCompiler:
    """
    Compiles single assets for an Env.

    Example:
        compiler = AssetCompiler(env)
        asset = compiler.compile("app.js")
        asset.data, asset.digest
    """

    def __init__(self, env: Env):
        self.env = env

    def _locate(self, logical_path: str) -> tuple[Path, Path] | None:
        """Return (search path, source file) for a logical path."""
        suffixes = self.env.processors.transformer_suffixes
        for base in reversed(self.env.paths):
            for candidate in [base / logical_path] + [
                base / f"{logical_path}{suffix}" for suffix in suffixes
            ]:
                if not candidate.is_file():
                    continue
                # "../" in a logical path must not escape the search path
                if not candidate.resolve().is_relative_to(base):
                    continue
                return base, candidate
        return None

    def find(self, logical_path: str) -> Path | None:
        """Resolve a logical path to its source file, or None."""
        found = self._locate(logical_path)
        return found[1] if found else None

    def output_path(self, relative: str) -> str:
        """Logical path a source compiles to (`app.js.j2` -> `app.js`)."""
        return self._chain_for(relative)[0]

    def _chain_for(self, relative: str) -> tuple[str, list[Processor]]:
        """Strip transformer suffixes, returning the output name and the chain."""
        chain: list[Processor] = []
        name = relative
        while True:
            suffix = Path(name).suffix
            transformer = self.env.processors.transformer_for(suffix) if suffix else None
            if transformer is None:
                break
            chain.append(transformer)
            name = name[: -len(suffix)]

        compressor = self.env.processors.compressor_for(Path(name).suffix)
        if compressor is not None:
            chain.append(compressor)
        return name, chain

    def compile(self, logical_path: str) -> CompiledAsset:
        """
        Compile one asset.

        Args:
            logical_path: Path relative to the search paths

        Returns:
            CompiledAsset named by its output logical path

        Raises:
            AssetNotFoundError: No search path holds the asset
            CompileError: A processor failed
        """
        found = self._locate(logical_path)
        if found is None:
            raise AssetNotFoundError(logical_path, searched=list(self.env.paths))

        base, source = found
        output_path, chain = self._chain_for(source.relative_to(base).as_posix())

        def produce() -> bytes:
            return self._process(source, output_path, chain)

        if any(p.dynamic for p in chain):
            data = produce()
        else:
            stat = source.stat()
            names = ",".join(p.name for p in chain)
            key = f"asset:{source}:{stat.st_mtime_ns}:{stat.st_size}:{names}"
            data = self.env.cache.fetch(key, produce)

        return CompiledAsset(logical_path=output_path, source=source, data=data)

    def _process(self, source: Path, output_path: str, chain: list[Processor]) -> bytes:
        data = source.read_bytes()
        ctx = ProcessorContext(logical_path=output_path, source=source, env=self.env)
        for processor in chain:
            try:
                data = processor.process(data, ctx)
            except Exception as e:
                logger.error(f"[compiler] {processor.name} failed on {source}: {e}")
                raise CompileError(source, str(e), processor=processor.name) from e
        logger.debug(f"[compiler] compiled {output_path} from {source} ({len(data)} bytes)")
        return data
