"""Tests for newest-request-wins request slots."""

from __future__ import annotations

import asyncio

import pytest

from fuzzlsp.resilience.cancellation import RequestScopes, RequestSlot
from fuzzlsp.resilience.errors import RequestSupersededError


@pytest.mark.asyncio
async def test_single_request_returns_result() -> None:
    slot = RequestSlot("test")

    async def _op() -> str:
        return "ok"

    assert await slot.run(_op) == "ok"
    assert not slot.busy


@pytest.mark.asyncio
async def test_newer_request_supersedes_older() -> None:
    """Second submission cancels the first; first caller is told so."""
    slot = RequestSlot("test")
    started = asyncio.Event()

    async def _slow() -> str:
        started.set()
        await asyncio.sleep(1)
        return "slow"

    async def _fast() -> str:
        return "fast"

    first = asyncio.create_task(slot.run(_slow))
    await started.wait()
    assert slot.busy

    assert await slot.run(_fast) == "fast"
    with pytest.raises(RequestSupersededError):
        await first


@pytest.mark.asyncio
async def test_outer_cancellation_is_not_superseded() -> None:
    """Cancelling the caller re-raises CancelledError."""
    slot = RequestSlot("test")
    started = asyncio.Event()

    async def _slow() -> str:
        started.set()
        await asyncio.sleep(1)
        return "slow"

    task = asyncio.create_task(slot.run(_slow))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_error_propagates() -> None:
    slot = RequestSlot("test")

    async def _failing() -> str:
        raise ConnectionError("boom")

    with pytest.raises(ConnectionError, match="boom"):
        await slot.run(_failing)
    assert not slot.busy


@pytest.mark.asyncio
async def test_cancel_idle_slot() -> None:
    assert RequestSlot("test").cancel() is False


class TestRequestScopes:
    def test_shared_slot(self) -> None:
        scopes = RequestScopes("ollama")
        assert scopes.slot("file:///a.c") is scopes.slot("file:///b.c")

    def test_per_document_slots(self) -> None:
        scopes = RequestScopes("ollama", per_document=True)
        a = scopes.slot("file:///a.c")
        assert a is scopes.slot("file:///a.c")
        assert a is not scopes.slot("file:///b.c")

    def test_release_forgets_slot(self) -> None:
        scopes = RequestScopes("ollama", per_document=True)
        a = scopes.slot("file:///a.c")
        scopes.release("file:///a.c")
        assert scopes.slot("file:///a.c") is not a
