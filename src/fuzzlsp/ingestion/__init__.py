"""Document ingestion — read sources, split into chunks."""

from fuzzlsp.ingestion.chunker import chunk_document, count_lines
from fuzzlsp.ingestion.schemas import Chunk
from fuzzlsp.ingestion.sources import is_binary, read_document, uri_to_path

__all__ = [
    "Chunk",
    "chunk_document",
    "count_lines",
    "is_binary",
    "read_document",
    "uri_to_path",
]
