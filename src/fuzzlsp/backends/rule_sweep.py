"""Rule-sweep strategy: one request per (rule × chunk).

Each request evaluates a single coding-standard rule, which keeps the
model's attention narrow at the cost of N× more requests. Responses
are joined rule-major, chunk-minor.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from fuzzlsp.backends.base import ChatBackend
from fuzzlsp.config import Settings
from fuzzlsp.constants import BackendKind
from fuzzlsp.ingestion.schemas import Chunk
from fuzzlsp.prompts import (
    CODING_STANDARD_RULES,
    build_chunk_query,
    build_rule_system_prompt,
)
from fuzzlsp.resilience.errors import BackendConfigError

logger = logging.getLogger(__name__)


class RuleSweepBackend(ChatBackend):
    """Evaluates every rule against every chunk. Default provider is OpenAI."""

    kind = BackendKind.OPENAI

    def __init__(
        self,
        settings: Settings,
        rules: Sequence[str] = CODING_STANDARD_RULES,
    ) -> None:
        super().__init__(settings)
        if not rules:
            raise ValueError("rule sweep needs at least one rule")
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[str, ...]:
        return self._rules

    def _check_prerequisites(self) -> None:
        needs_key = self._model.startswith("openai/")
        if needs_key and not self._settings.openai_api_key:
            raise BackendConfigError("OPENAI_API_KEY not set")

    def _api_key(self) -> str | None:
        return self._settings.openai_api_key or None

    async def _sweep(
        self, uri: str, chunks: list[Chunk], instruction: str
    ) -> str:
        parts: list[str] = []
        for rule_no, rule in enumerate(self._rules, 1):
            system = build_rule_system_prompt(self.system_prompt, rule)
            for chunk in chunks:
                query = build_chunk_query(
                    uri, chunk.index, chunk.content, instruction
                )
                response = await self._request(system, query)
                logger.debug(
                    "event=rule_chunk_response uri=%s rule=%d/%d"
                    " chunk=%d/%d chars=%d",
                    uri,
                    rule_no,
                    len(self._rules),
                    chunk.index,
                    len(chunks),
                    len(response),
                )
                parts.append(response)
                parts.append("\n")
        return "".join(parts)
