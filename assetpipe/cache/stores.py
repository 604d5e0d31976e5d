"""
Cache stores for compiled assets.

Three interchangeable backends behind one small protocol:

- MemoryStore: bounded in-process LRU, lost when the build exits
- FileStore: one file per key under a cache directory, survives builds
- NullStore: stores nothing, every lookup misses

Stores deal in bytes only. They do no logging of their own; the Cache
wrapper in cache.py records hits, misses and writes.
"""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from cachetools import LRUCache

DEFAULT_MAX_SIZE = 1000


@runtime_checkable
class CacheStore(Protocol):
    """Interface shared by all cache backends."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None on a miss."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def clear(self) -> None:
        """Drop every stored value."""
        ...


class NullStore:
    """A store that never holds anything."""

    def get(self, key: str) -> bytes | None:
        return None

    def set(self, key: str, value: bytes) -> None:
        pass

    def clear(self) -> None:
        pass

    def __repr__(self) -> str:
        return "NullStore()"


class MemoryStore:
    """
    Bounded LRU store kept in process memory.

    Backed by cachetools.LRUCache, which is not thread-safe on its own,
    so every operation holds an internal lock.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        self._max_size = max_size
        self._data: LRUCache = LRUCache(maxsize=max_size)
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore(size={len(self._data)}, max_size={self._max_size})"


class FileStore:
    """
    Store that keeps one file per key under a directory.

    Keys are hashed into `<root>/<aa>/<sha256>.cache`. Writes go to a
    temporary file first and are moved into place, so concurrent
    readers never see a partial value.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.root / digest[:2] / f"{digest}.cache"

    def get(self, key: str) -> bytes | None:
        try:
            return self._path_for(key).read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        if self.root.exists():
            shutil.rmtree(self.root)

    def __repr__(self) -> str:
        return f"FileStore(root='{self.root}')"
