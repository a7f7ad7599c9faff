"""Newest-request-wins execution slots for backend calls.

A RequestSlot holds one mutex and one cancellation handle (the task
currently running or waiting for the mutex). Submitting new work
cancels whatever the slot was holding, so only the most recent
request is ever allowed to finish. There is no queue: a superseded
caller gets RequestSupersededError instead of a result.

Single-process, single event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fuzzlsp.resilience.errors import RequestSupersededError

logger = logging.getLogger(__name__)


class RequestSlot:
    """One outstanding request at a time; the newest one wins.

    Usage::

        slot = RequestSlot("ollama")
        text = await slot.run(lambda: backend_sweep(uri, text))
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._lock = asyncio.Lock()
        self._current: asyncio.Task[Any] | None = None

    @property
    def busy(self) -> bool:
        """True while a request holds or waits for the slot."""
        return self._current is not None and not self._current.done()

    def cancel(self) -> bool:
        """Cancel the stored in-flight request, if any."""
        task = self._current
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def run(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``operation`` in the slot, cancelling the previous request.

        Cancellation only interrupts the awaited network call; anything
        the superseded operation already produced is not rolled back.
        """
        if self.cancel():
            logger.info("event=request_superseded slot=%s", self.name)

        task = asyncio.ensure_future(self._guarded(operation))
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # The caller itself is being cancelled: honour it.
                raise
            raise RequestSupersededError(
                f"request on slot {self.name!r} superseded by a newer one"
            ) from None
        finally:
            if self._current is task:
                self._current = None

    async def _guarded(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        async with self._lock:
            return await operation()


class RequestScopes:
    """Hands out request slots: one shared, or one per document."""

    def __init__(self, name: str, *, per_document: bool = False) -> None:
        self._name = name
        self._per_document = per_document
        self._shared = RequestSlot(name)
        self._slots: dict[str, RequestSlot] = {}

    def slot(self, uri: str) -> RequestSlot:
        if not self._per_document:
            return self._shared
        if uri not in self._slots:
            self._slots[uri] = RequestSlot(f"{self._name}:{uri}")
        return self._slots[uri]

    def release(self, uri: str) -> None:
        """Forget the per-document slot for a closed document."""
        slot = self._slots.pop(uri, None)
        if slot is not None:
            slot.cancel()
