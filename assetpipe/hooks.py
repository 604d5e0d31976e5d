"""
Hook Registry for assetpipe.

Named lifecycle extension points. Callbacks are registered under a
(scope, event) pair with a priority and are triggered synchronously,
in ascending priority order (ties keep registration order).

There is no global registry. The host Site owns one and hands it to
every Env it builds.

Known points:
    env:before_init     (env)            config resolved, nothing else built
    env:after_init      (env)            env is fully initialized
    asset:after_compile (env, entry)     one manifest entry was written
    site:pre_render     (site, payload)  fired by the host before each render

Usage:
    hooks = HookRegistry()

    @hooks.on("env", "after_init", priority=3)
    def report(env):
        print(env.manifest.assets)

    hooks.trigger("env", "after_init", env)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 2

HookCallback = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class HookRegistration:
    """A single registered callback."""

    scope: str
    event: str
    priority: int
    callback: HookCallback
    sequence: int = 0

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority, self.sequence)


class HookRegistry:
    """
    Registry of lifecycle callbacks.

    Callbacks receive the trigger arguments explicitly (for env hooks,
    the Env being initialized) and may read or mutate that state while
    the trigger runs. A callback that raises aborts the trigger and the
    exception propagates to the caller.
    """

    def __init__(self) -> None:
        self._hooks: dict[tuple[str, str], list[HookRegistration]] = {}
        self._counter = itertools.count()

    def register(
        self,
        scope: str,
        event: str,
        callback: HookCallback,
        *,
        priority: int = DEFAULT_PRIORITY,
    ) -> HookRegistration:
        """
        Register a callback for (scope, event).

        Args:
            scope: Hook scope, e.g. "env" or "site"
            event: Event name within the scope, e.g. "after_init"
            callback: Called with the trigger arguments
            priority: Lower runs first

        Returns:
            The registration, usable with unregister()

        Raises:
            ValueError: If callback is not callable or priority not an int
        """
        if not callable(callback):
            raise ValueError(f"Hook callback for {scope}:{event} must be callable")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise ValueError(f"Hook priority must be an int, got {priority!r}")

        registration = HookRegistration(
            scope=scope,
            event=event,
            priority=priority,
            callback=callback,
            sequence=next(self._counter),
        )
        hooks = self._hooks.setdefault((scope, event), [])
        hooks.append(registration)
        hooks.sort(key=lambda r: r.sort_key)
        logger.debug(
            f"[hooks] registered {scope}:{event} "
            f"{getattr(callback, '__qualname__', repr(callback))} (priority={priority})"
        )
        return registration

    def on(
        self,
        scope: str,
        event: str,
        *,
        priority: int = DEFAULT_PRIORITY,
    ) -> Callable[[HookCallback], HookCallback]:
        """Decorator form of register()."""

        def decorator(callback: HookCallback) -> HookCallback:
            self.register(scope, event, callback, priority=priority)
            return callback

        return decorator

    def unregister(self, registration: HookRegistration) -> bool:
        """
        Remove a registration.

        Returns:
            True if it was removed, False if it was not registered
        """
        hooks = self._hooks.get((registration.scope, registration.event), [])
        if registration in hooks:
            hooks.remove(registration)
            return True
        return False

    def registrations(self, scope: str, event: str) -> list[HookRegistration]:
        """Registrations for (scope, event) in execution order."""
        return list(self._hooks.get((scope, event), []))

    def has(self, scope: str, event: str) -> bool:
        return bool(self._hooks.get((scope, event)))

    def trigger(self, scope: str, event: str, *args: Any) -> int:
        """
        Run every callback for (scope, event) with args.

        Returns:
            Number of callbacks run
        """
        hooks = self.registrations(scope, event)
        if not hooks:
            return 0

        logger.debug(f"[hooks] calling {len(hooks)} hook(s) for {scope}:{event}")
        for registration in hooks:
            registration.callback(*args)
        return len(hooks)

    def clear(self) -> None:
        """Clear all registrations (for testing)."""
        self._hooks.clear()

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    def __repr__(self) -> str:
        points = [f"{scope}:{event}" for scope, event in self._hooks]
        return f"HookRegistry(points={points})"
