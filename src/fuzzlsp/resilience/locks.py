"""Per-key mutual exclusion for read-modify-write on the document store.

The store does no locking of its own. Every handler that loads,
analyses and writes back state for a uri runs under that uri's lock,
so two notifications for the same document never interleave while
different documents proceed independently.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """Lazily created ``asyncio.Lock`` per key.

    Usage::

        locks = KeyedLock()
        async with locks.hold("file:///a.c"):
            ...
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                # Nobody else holds or awaits it: drop the entry.
                del self._waiters[key]
                self._locks.pop(key, None)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @property
    def active_keys(self) -> list[str]:
        """Return keys that are currently held or awaited."""
        return list(self._locks.keys())
