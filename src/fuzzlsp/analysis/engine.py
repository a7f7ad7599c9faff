"""Analysis cycle: request, parse, retry with a corrective prompt.

One cycle per (uri, text):

    attempt 1      backend sweep with no instruction
    every attempt  raw text saved as the document's analysis text
    parse ok       stamp uri, replace diagnostics, done
    parse empty    next attempt with the retry prompt as instruction
    attempts used  ExtractionError; stored diagnostics stay as they were

Provider errors end the cycle immediately: only unparseable output is
retried, and the number of attempts is bounded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from fuzzlsp.analysis.events import CycleEvent, ProgressCallback
from fuzzlsp.analysis.extraction import (
    SpanMatcher,
    extract_diagnostics,
    find_array_spans,
)
from fuzzlsp.analysis.schemas import AnalysisOutcome, Diagnostic
from fuzzlsp.backends.base import AnalysisBackend
from fuzzlsp.config import Settings
from fuzzlsp.constants import MAX_ATTEMPTS, CycleState
from fuzzlsp.ingestion.chunker import count_lines
from fuzzlsp.prompts import load_prompt
from fuzzlsp.resilience.errors import ExtractionError, classify_error
from fuzzlsp.store.protocols import DocumentStore

logger = logging.getLogger(__name__)


class _UnparseableOutput(Exception):
    """Retry signal: an attempt produced no usable diagnostics."""

    def __init__(self, attempt: int, raw_chars: int) -> None:
        super().__init__(
            f"attempt {attempt}: no diagnostic array in {raw_chars} chars"
        )


class AnalysisEngine:
    """Runs analysis cycles against one backend and one store."""

    def __init__(
        self,
        backend: AnalysisBackend,
        store: DocumentStore,
        *,
        retry_prompt: str,
        max_attempts: int = MAX_ATTEMPTS,
        matcher: SpanMatcher = find_array_spans,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._backend = backend
        self._store = store
        self._retry_prompt = retry_prompt
        self._max_attempts = max_attempts
        self._matcher = matcher
        self._on_progress = on_progress

    @classmethod
    def from_settings(
        cls,
        backend: AnalysisBackend,
        store: DocumentStore,
        settings: Settings,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisEngine:
        """Build an engine, reading the retry prompt file once."""
        return cls(
            backend,
            store,
            retry_prompt=load_prompt(
                settings.retry_prompt_file, label="retry prompt"
            ),
            max_attempts=settings.max_attempts,
            on_progress=on_progress,
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def run(self, uri: str, text: str) -> AnalysisOutcome:
        """Run one full cycle for ``uri``.

        Raises ExtractionError after the last unparseable attempt;
        backend and provider errors propagate unchanged.
        """
        if count_lines(text) == 0:
            # Nothing to send: an empty document has no findings.
            self._store.store_analysis(uri, "")
            self._store.update_diagnostics(uri, [])
            self._emit(uri, CycleState.SUCCEEDED, 0, "empty document")
            return AnalysisOutcome(uri=uri, state=CycleState.SUCCEEDED)

        diagnostics: list[Diagnostic] = []
        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            retry=retry_if_exception_type(_UnparseableOutput),
            before_sleep=self._before_retry(uri),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    diagnostics = await self._attempt(uri, text, attempts)
        except _UnparseableOutput:
            logger.error(
                "event=analysis_failed uri=%s attempts=%d",
                uri,
                attempts,
            )
            self._emit(uri, CycleState.FAILED, attempts)
            raise ExtractionError(uri, attempts) from None

        stamped = [d.model_copy(update={"uri": uri}) for d in diagnostics]
        self._store.update_diagnostics(uri, stamped)
        logger.info(
            "event=analysis_succeeded uri=%s attempt=%d diagnostics=%d",
            uri,
            attempts,
            len(stamped),
        )
        self._emit(uri, CycleState.SUCCEEDED, attempts)
        return AnalysisOutcome(
            uri=uri,
            state=CycleState.SUCCEEDED,
            attempts=attempts,
            diagnostics=stamped,
        )

    async def _attempt(
        self, uri: str, text: str, number: int
    ) -> list[Diagnostic]:
        instruction = self._retry_prompt if number > 1 else ""
        self._emit(uri, CycleState.REQUESTING, number)
        try:
            raw = await self._backend.analyse_document(
                uri, text, instruction=instruction
            )
        except Exception as e:
            logger.warning(
                "event=analysis_request_failed uri=%s attempt=%d/%d"
                " error_class=%s error=%s",
                uri,
                number,
                self._max_attempts,
                classify_error(e).value,
                e,
            )
            raise

        self._store.store_analysis(uri, raw)

        self._emit(uri, CycleState.PARSING, number)
        result = extract_diagnostics(raw, self._matcher)
        if not result.ok:
            logger.warning(
                "event=analysis_unparseable uri=%s attempt=%d/%d"
                " spans=%d rejected=%d",
                uri,
                number,
                self._max_attempts,
                result.spans_found,
                result.spans_rejected,
            )
            raise _UnparseableOutput(number, len(raw))
        return result.diagnostics

    def _before_retry(
        self, uri: str
    ) -> Callable[[RetryCallState], None]:
        def hook(retry_state: RetryCallState) -> None:
            number = retry_state.attempt_number
            logger.info(
                "event=analysis_retrying uri=%s next_attempt=%d/%d",
                uri,
                number + 1,
                self._max_attempts,
            )
            self._emit(uri, CycleState.RETRYING, number + 1)

        return hook

    def _emit(
        self,
        uri: str,
        state: CycleState,
        attempt: int,
        message: str = "",
    ) -> None:
        if self._on_progress is None:
            return
        self._on_progress(
            CycleEvent(
                uri=uri,
                state=state,
                attempt=attempt,
                max_attempts=self._max_attempts,
                message=message,
            )
        )
