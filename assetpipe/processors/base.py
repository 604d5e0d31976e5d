"""
Processor abstraction for assetpipe.

Processors are single-responsibility content transforms applied while
compiling an asset. Two kinds are registered on every Env:

- Transformers, keyed by a source suffix (".j2"). The suffix is
  stripped from the logical path once the transformer has run, so
  `app.js.j2` compiles to `app.js`.
- Compressors, keyed by an output suffix (".css", ".js"), run last and
  only when compression is enabled.

A processor that executes code embedded in asset content sets
`dynamic = True`. Safe mode removes every dynamic processor.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from assetpipe.env import Env

logger = logging.getLogger(__name__)


@dataclass
class ProcessorContext:
    """What a processor knows about the asset it is transforming."""

    logical_path: str
    source: Path
    env: Env | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class Processor(ABC):
    """
    Base class for all asset processors.

    Subclasses must implement:
    - name: Unique processor identifier
    - suffix: The file suffix the processor is registered for
    - process(): The transformation
    """

    dynamic: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this processor, used in logging and cache keys."""
        ...

    @property
    @abstractmethod
    def suffix(self) -> str:
        """Suffix handled by this processor, including the dot."""
        ...

    @abstractmethod
    def process(self, data: bytes, ctx: ProcessorContext) -> bytes:
        """
        Transform asset content.

        Args:
            data: Current content
            ctx: Asset being compiled

        Returns:
            Transformed content

        Raises:
            Exception: The compiler wraps it in a CompileError
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', suffix='{self.suffix}')"


class ProcessorRegistry:
    """
    Per-Env table of transformers and compressors.

    One registry per Env. Safe mode only edits the registry it is given.
    """

    def __init__(self) -> None:
        self._transformers: dict[str, Processor] = {}
        self._compressors: dict[str, Processor] = {}

    # ==================== Transformers ====================

    def register_transformer(self, processor: Processor) -> None:
        if processor.suffix in self._transformers:
            logger.warning(f"Replacing transformer for {processor.suffix}: {processor.name}")
        self._transformers[processor.suffix] = processor
        logger.debug(f"Registered transformer: {processor.name} ({processor.suffix})")

    def transformer_for(self, suffix: str) -> Processor | None:
        return self._transformers.get(suffix)

    @property
    def transformers(self) -> list[Processor]:
        return list(self._transformers.values())

    @property
    def transformer_suffixes(self) -> list[str]:
        return list(self._transformers.keys())

    def remove_dynamic(self) -> list[Processor]:
        """
        Remove every processor that executes embedded code.

        Returns:
            The removed processors
        """
        removed = [p for p in self._transformers.values() if p.dynamic]
        removed += [p for p in self._compressors.values() if p.dynamic]
        self._transformers = {s: p for s, p in self._transformers.items() if not p.dynamic}
        self._compressors = {s: p for s, p in self._compressors.items() if not p.dynamic}
        return removed

    # ==================== Compressors ====================

    def register_compressor(self, processor: Processor) -> None:
        self._compressors[processor.suffix] = processor
        logger.debug(f"Registered compressor: {processor.name} ({processor.suffix})")

    def compressor_for(self, suffix: str) -> Processor | None:
        return self._compressors.get(suffix)

    @property
    def compressors(self) -> list[Processor]:
        return list(self._compressors.values())

    def __repr__(self) -> str:
        return (
            f"ProcessorRegistry(transformers={self.transformer_suffixes}, "
            f"compressors={list(self._compressors.keys())})"
        )
