"""
Logging cache wrapper.

Cache wraps exactly one CacheStore and records every hit, miss and
write. It also adds fetch(), which collapses concurrent producers of
the same key: while one thread computes a value, other callers asking
for that key wait for its result instead of computing it again.

Usage:
    cache = Cache(MemoryStore())
    data = cache.fetch("asset:app.js:...", lambda: compile_app())
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future

from .stores import CacheStore

logger = logging.getLogger(__name__)


class Cache:
    """
    Cache facade over a single store.

    Thread-safety: the store handles its own locking; the in-flight
    table used by fetch() is guarded by a lock here.
    """

    def __init__(self, store: CacheStore, log: logging.Logger | None = None):
        self.store = store
        self._logger = log or logger
        self._lock = threading.Lock()
        self._inflight: dict[str, Future[bytes]] = {}

    def get(self, key: str) -> bytes | None:
        value = self.store.get(key)
        if value is None:
            self._logger.debug(f"[cache] miss {key}")
        else:
            self._logger.debug(f"[cache] hit {key}")
        return value

    def set(self, key: str, value: bytes) -> None:
        self._logger.debug(f"[cache] write {key} ({len(value)} bytes)")
        self.store.set(key, value)

    def clear(self) -> None:
        self._logger.debug(f"[cache] clear {self.store!r}")
        self.store.clear()

    def fetch(self, key: str, producer: Callable[[], bytes]) -> bytes:
        """
        Return the cached value for key, producing and storing it on a miss.

        Args:
            key: Cache key
            producer: Called at most once per key at a time

        Returns:
            The cached or freshly produced bytes

        Raises:
            Whatever producer raises; waiting callers see the same error
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._lock:
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            self._logger.debug(f"[cache] waiting on in-flight {key}")
            return future.result()

        try:
            value = producer()
            self.set(key, value)
            future.set_result(value)
            return value
        except Exception as e:
            future.set_exception(e)
            raise
        finally:
            if not future.done():
                future.cancel()
            with self._lock:
                self._inflight.pop(key, None)

    def __repr__(self) -> str:
        return f"Cache(store={self.store!r})"
