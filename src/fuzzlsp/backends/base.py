"""Backend protocol and the shared chat-model implementation.

A backend turns a document into one block of raw model text
(``analyse_document``) and a cursor prefix into completion candidates
(``complete_code``). Strategies differ only in how they sweep the
chunks; prompt loading, the provider call and newest-request-wins
cancellation live in ``ChatBackend``.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Protocol

from fuzzlsp.backends._llm_call import llm_call
from fuzzlsp.config import Settings
from fuzzlsp.constants import CONNECT_TEST_SNIPPET, BackendKind
from fuzzlsp.ingestion.chunker import chunk_document
from fuzzlsp.ingestion.schemas import Chunk
from fuzzlsp.prompts import build_completion_query, load_prompt
from fuzzlsp.resilience.cancellation import RequestScopes
from fuzzlsp.resilience.errors import BackendNotReadyError

logger = logging.getLogger(__name__)


class AnalysisBackend(Protocol):
    kind: BackendKind

    async def start(self) -> None: ...

    async def analyse_document(
        self, uri: str, text: str, *, instruction: str = ""
    ) -> str: ...

    async def complete_code(
        self, uri: str, prefix: str, system_prompt: str
    ) -> list[str]: ...

    def release(self, uri: str) -> None: ...


class ChatBackend:
    """Base for litellm-backed strategies. Subclasses implement ``_sweep``."""

    kind: ClassVar[BackendKind]

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._model = settings.model_name
        self._system_prompt: str | None = None
        self._scopes = RequestScopes(
            str(self.kind),
            per_document=settings.per_document_cancellation,
        )

    @property
    def connected(self) -> bool:
        return self._system_prompt is not None

    @property
    def model(self) -> str:
        return self._model

    @property
    def system_prompt(self) -> str:
        if self._system_prompt is None:
            raise self._not_ready()
        return self._system_prompt

    def _require_started(self) -> None:
        if self._system_prompt is None:
            raise self._not_ready()

    def _not_ready(self) -> BackendNotReadyError:
        return BackendNotReadyError(
            f"{self.kind} backend used before start()"
        )

    async def start(self) -> None:
        """Load the system prompt and optionally run the connect test."""
        logger.info(
            "event=backend_starting backend=%s model=%s",
            self.kind,
            self._model,
        )
        self._check_prerequisites()
        self._system_prompt = load_prompt(
            self._settings.prompt_file, label="system prompt"
        )
        if self._settings.connect_test:
            try:
                response = await self._request(
                    self.system_prompt, CONNECT_TEST_SNIPPET
                )
            except BaseException:
                self._system_prompt = None
                raise
            logger.info(
                "event=connect_test_ok backend=%s chars=%d",
                self.kind,
                len(response),
            )
        logger.info("event=backend_ready backend=%s", self.kind)

    def _check_prerequisites(self) -> None:
        """Hook for provider-specific startup checks."""

    async def analyse_document(
        self, uri: str, text: str, *, instruction: str = ""
    ) -> str:
        """Sweep every chunk of ``text`` and return the joined responses.

        ``instruction`` (the retry prompt, on later attempts) is sent
        ahead of each chunk; it is never part of the document text.
        """
        self._require_started()
        chunks = chunk_document(
            text, self._settings.chunk_size, strip_prefix=instruction
        )
        logger.info(
            "event=document_chunked uri=%s chunks=%d backend=%s",
            uri,
            len(chunks),
            self.kind,
        )
        return await self._scopes.slot(uri).run(
            lambda: self._sweep(uri, chunks, instruction)
        )

    async def _sweep(
        self, uri: str, chunks: list[Chunk], instruction: str
    ) -> str:
        raise NotImplementedError

    async def complete_code(
        self, uri: str, prefix: str, system_prompt: str
    ) -> list[str]:
        """Ask for completions of ``prefix``; one candidate per line."""
        self._require_started()
        query = build_completion_query(prefix)
        response = await self._scopes.slot(uri).run(
            lambda: self._request(system_prompt, query)
        )
        logger.debug(
            "event=completion_response uri=%s chars=%d",
            uri,
            len(response),
        )
        return response.split("\n")

    def release(self, uri: str) -> None:
        """Drop per-document request state for a closed document."""
        self._scopes.release(uri)

    async def _request(self, system: str, query: str) -> str:
        result = await llm_call(
            self._model,
            [
                {"role": "system", "content": system},
                {"role": "user", "content": query},
            ],
            max_tokens=self._settings.model_max_tokens,
            temperature=self._settings.model_temperature,
            seed=self._settings.model_seed,
            timeout=self._settings.llm_timeout_seconds,
            api_base=self._settings.api_base,
            api_key=self._api_key(),
        )
        return result.content

    def _api_key(self) -> str | None:
        return None
