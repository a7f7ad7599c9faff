"""Document lifecycle handlers: store, analyse, serve diagnostics.

Editor notifications (open, change, save, close) and requests (pull
diagnostics, hover, completion) land here. Every read-modify-write on
a uri runs under that uri's lock; the store itself never locks.

Failures never stop the service: analysis errors are logged with
their class and returned in ``SyncStatus`` so the caller can report
them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from fuzzlsp.analysis.engine import AnalysisEngine
from fuzzlsp.analysis.events import ProgressCallback
from fuzzlsp.backends import create_backend
from fuzzlsp.backends.base import AnalysisBackend
from fuzzlsp.config import Settings
from fuzzlsp.constants import COMPLETION_CONTEXT_LINES, SERVER_NAME
from fuzzlsp.export.diagnostics import build_diagnostic_report, render_hover
from fuzzlsp.ingestion.sources import read_document
from fuzzlsp.prompts import COMPLETION_SYSTEM_PROMPT
from fuzzlsp.resilience.errors import (
    AlreadyStoredError,
    DocumentNotFoundError,
    ExtractionError,
    RequestSupersededError,
    classify_error,
)
from fuzzlsp.resilience.locks import KeyedLock
from fuzzlsp.store.memory import InMemoryDocumentStore
from fuzzlsp.store.protocols import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class SyncStatus:
    """Result of handling one open/change/save notification."""

    uri: str
    ok: bool
    # False when the content was unchanged and analysis was skipped
    analysed: bool = False
    attempts: int = 0
    diagnostics: int = 0
    duration_ms: float = 0.0
    error: str | None = None
    error_class: str | None = None


def completion_prefix(text: str, line: int, character: int) -> str:
    """Previous context lines plus the current line up to the cursor.

    ``line`` and ``character`` are 0-based editor positions. The current
    line is included only when ``0 < character <= len(line)``, so at
    column 0 the prefix is the context lines alone.
    """
    lines = text.splitlines()
    start = max(0, line - COMPLETION_CONTEXT_LINES)
    parts = lines[start:line]
    if 0 <= line < len(lines) and 0 < character <= len(lines[line]):
        parts.append(lines[line][:character])
    return "\n".join(parts)


def _elapsed(t0: float) -> float:
    return round((time.monotonic() - t0) * 1000, 1)


class DocumentService:
    """Owns the store, the backend and the analysis engine."""

    def __init__(
        self,
        backend: AnalysisBackend,
        store: DocumentStore,
        engine: AnalysisEngine,
        *,
        server_name: str = SERVER_NAME,
    ) -> None:
        self._backend = backend
        self._store = store
        self._engine = engine
        self._locks = KeyedLock()
        self.server_name = server_name

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        backend: AnalysisBackend | None = None,
        store: DocumentStore | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DocumentService:
        """Wire the configured backend, an in-memory store and an engine."""
        backend = backend or create_backend(settings)
        store = store or InMemoryDocumentStore()
        engine = AnalysisEngine.from_settings(
            backend, store, settings, on_progress=on_progress
        )
        return cls(backend, store, engine)

    @property
    def store(self) -> DocumentStore:
        return self._store

    async def start(self) -> None:
        await self._backend.start()

    # ── Notifications ────────────────────────────────────

    async def did_open(self, uri: str, text: str) -> SyncStatus:
        return await self._sync(uri, text, event="open")

    async def did_change(self, uri: str, text: str) -> SyncStatus:
        return await self._sync(uri, text, event="change")

    async def did_save(
        self, uri: str, text: str | None = None
    ) -> SyncStatus:
        """Analyse the saved content, reading the file when no text is sent."""
        if text is None:
            try:
                text = read_document(uri)
            except (OSError, ValueError) as e:
                logger.warning(
                    "event=document_read_failed uri=%s error=%s", uri, e
                )
                return SyncStatus(uri=uri, ok=False, error=str(e))
        return await self._sync(uri, text, event="save")

    async def did_close(self, uri: str) -> None:
        async with self._locks.hold(uri):
            self._store.delete(uri)
            self._backend.release(uri)
        logger.info("event=document_closed uri=%s", uri)

    # ── Requests ─────────────────────────────────────────

    async def pull_diagnostics(self, uri: str) -> dict[str, Any]:
        """Full diagnostic report; empty while the uri has no analysis."""
        try:
            diagnostics = self._store.get_diagnostics(uri)
        except DocumentNotFoundError:
            logger.debug("event=diagnostics_missing uri=%s", uri)
            diagnostics = []
        return build_diagnostic_report(diagnostics, self.server_name)

    async def hover(self, uri: str, line: int) -> str:
        """Markdown for diagnostics on 0-based ``line``; ``""`` when none."""
        try:
            diagnostics = self._store.get_diagnostics(uri)
        except DocumentNotFoundError:
            return ""
        return render_hover(diagnostics, line)

    async def complete(
        self,
        uri: str,
        line: int,
        character: int,
        text: str | None = None,
    ) -> list[str]:
        """Completion candidates at the cursor; ``[]`` on any failure."""
        if text is None:
            try:
                text = self._store.load(uri)
            except DocumentNotFoundError:
                logger.debug("event=completion_no_document uri=%s", uri)
                return []
        prefix = completion_prefix(text, line, character)
        try:
            return await self._backend.complete_code(
                uri, prefix, COMPLETION_SYSTEM_PROMPT
            )
        except RequestSupersededError:
            logger.info("event=completion_superseded uri=%s", uri)
            return []
        except Exception as e:
            logger.warning(
                "event=completion_failed uri=%s error_class=%s error=%s",
                uri,
                classify_error(e).value,
                e,
            )
            return []

    # ── Internals ────────────────────────────────────────

    async def _sync(self, uri: str, text: str, *, event: str) -> SyncStatus:
        t0 = time.monotonic()
        async with self._locks.hold(uri):
            try:
                self._store.store(uri, text)
            except AlreadyStoredError:
                logger.info(
                    "event=document_unchanged uri=%s trigger=%s", uri, event
                )
                return SyncStatus(
                    uri=uri, ok=True, duration_ms=_elapsed(t0)
                )

            logger.info(
                "event=analysis_started uri=%s trigger=%s", uri, event
            )
            try:
                outcome = await self._engine.run(uri, text)
            except ExtractionError as e:
                return SyncStatus(
                    uri=uri,
                    ok=False,
                    analysed=True,
                    attempts=e.attempts,
                    duration_ms=_elapsed(t0),
                    error=str(e),
                )
            except RequestSupersededError as e:
                logger.info(
                    "event=analysis_superseded uri=%s trigger=%s",
                    uri,
                    event,
                )
                self._store.forget_hash(uri)
                return SyncStatus(
                    uri=uri,
                    ok=False,
                    analysed=True,
                    duration_ms=_elapsed(t0),
                    error=str(e),
                )
            except Exception as e:
                error_class = classify_error(e).value
                logger.exception(
                    "event=analysis_error uri=%s trigger=%s error_class=%s",
                    uri,
                    event,
                    error_class,
                )
                self._store.forget_hash(uri)
                return SyncStatus(
                    uri=uri,
                    ok=False,
                    analysed=True,
                    duration_ms=_elapsed(t0),
                    error=str(e),
                    error_class=error_class,
                )

        return SyncStatus(
            uri=uri,
            ok=True,
            analysed=True,
            attempts=outcome.attempts,
            diagnostics=len(outcome.diagnostics),
            duration_ms=_elapsed(t0),
        )
