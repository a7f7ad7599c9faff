"""Split document text into line-numbered chunks."""

from __future__ import annotations

from fuzzlsp.constants import DEFAULT_CHUNK_SIZE
from fuzzlsp.ingestion.schemas import Chunk


def chunk_document(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    *,
    strip_prefix: str = "",
) -> list[Chunk]:
    """Split ``text`` into chunks of at most ``chunk_size`` lines.

    * Lines are numbered from 1 in the original document, so chunk ``i``
      covers lines ``(i-1)*K+1 .. min(i*K, L)``.
    * ``\\n`` and ``\\r\\n`` line endings are both accepted.
    * If the text starts with ``strip_prefix`` (a retry instruction
      glued onto the document by a caller), it is removed first.
    * Pure function of its inputs; empty text yields no chunks.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")

    if strip_prefix and text.startswith(strip_prefix):
        text = text[len(strip_prefix):]

    lines = text.splitlines()
    chunks: list[Chunk] = []
    for start in range(0, len(lines), chunk_size):
        window = lines[start:start + chunk_size]
        first = start + 1
        content = "".join(
            f"Line {first + offset}: {line}\n"
            for offset, line in enumerate(window)
        )
        chunks.append(
            Chunk(
                index=len(chunks) + 1,
                start_line=first,
                end_line=start + len(window),
                content=content,
            )
        )
    return chunks


def count_lines(text: str) -> int:
    """Number of lines ``chunk_document`` sees in ``text``."""
    return len(text.splitlines())
