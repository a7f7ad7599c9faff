"""Whole-chunk strategy: one request per chunk, static system prompt."""

from __future__ import annotations

import logging

from fuzzlsp.backends.base import ChatBackend
from fuzzlsp.constants import BackendKind
from fuzzlsp.ingestion.schemas import Chunk
from fuzzlsp.prompts import build_chunk_query

logger = logging.getLogger(__name__)


class ChunkSweepBackend(ChatBackend):
    """Sends each chunk once; responses joined in chunk order.

    Default provider is a local Ollama model.
    """

    kind = BackendKind.OLLAMA

    async def _sweep(
        self, uri: str, chunks: list[Chunk], instruction: str
    ) -> str:
        parts: list[str] = []
        for chunk in chunks:
            query = build_chunk_query(
                uri, chunk.index, chunk.content, instruction
            )
            response = await self._request(self.system_prompt, query)
            logger.debug(
                "event=chunk_response uri=%s chunk=%d/%d chars=%d",
                uri,
                chunk.index,
                len(chunks),
                len(response),
            )
            parts.append(response)
            parts.append("\n")
        return "".join(parts)
