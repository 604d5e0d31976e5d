"""
Exceptions for assetpipe.

All errors raised by the environment derive from AssetPipelineError,
so a host build can catch one type and exit non-zero.

Classification:
    - ConfigurationError: the asset config cannot be honoured (fatal)
    - AssetNotFoundError: a declared asset has no source file (fatal)
    - CompileError: a processor failed on a source file (fatal)
    - EnvironmentStateError: an Env was driven out of order

Nothing here is retried. Excluded source directories and empty globs
are not errors and never raise.
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Exceptions
# =============================================================================


class AssetPipelineError(Exception):
    """Base exception for asset pipeline errors."""

    pass


class ConfigurationError(AssetPipelineError):
    """Raised when the asset configuration holds an unsupported value."""

    def __init__(self, message: str, *, key: str | None = None):
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        if self.key:
            return f"[{self.key}] {self.args[0]}"
        return str(self.args[0])


class AssetNotFoundError(AssetPipelineError, FileNotFoundError):
    """
    Raised when a literal precompile target or raw source does not exist.

    Also a FileNotFoundError, so callers treating it as plain I/O
    failure keep working.
    """

    def __init__(self, path: str | Path, searched: list[Path] | None = None):
        super().__init__(f"Asset not found: {path}")
        self.path = str(path)
        self.searched = list(searched or [])

    def __str__(self) -> str:
        if self.searched:
            paths = ", ".join(str(p) for p in self.searched)
            return f"Asset not found: {self.path} (searched: {paths})"
        return f"Asset not found: {self.path}"


class CompileError(AssetPipelineError):
    """
    Raised when a processor fails on a source file.

    The underlying exception is chained as __cause__.
    """

    def __init__(self, path: str | Path, message: str, *, processor: str | None = None):
        super().__init__(message)
        self.path = str(path)
        self.processor = processor

    def __str__(self) -> str:
        where = f"{self.path} ({self.processor})" if self.processor else self.path
        return f"Failed to compile {where}: {self.args[0]}"


class EnvironmentStateError(AssetPipelineError):
    """Raised when an Env is initialized twice or used before it is ready."""

    pass
