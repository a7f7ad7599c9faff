"""Dict-backed document store.

Holds, per uri: the whole document text and its SHA-256, the last raw
model output, and the current diagnostic list. Nothing is persisted;
a restart starts empty.
"""

from __future__ import annotations

import hashlib
import logging

from fuzzlsp.analysis.schemas import Diagnostic
from fuzzlsp.resilience.errors import AlreadyStoredError, DocumentNotFoundError

logger = logging.getLogger(__name__)


def content_hash(text: str) -> str:
    """Stable hash used to skip re-analysis of unchanged content."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class InMemoryDocumentStore:
    """DocumentStore backed by plain dicts."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._hashes: dict[str, str] = {}
        self._analysis: dict[str, str] = {}
        self._diagnostics: dict[str, list[Diagnostic]] = {}

    def load(self, uri: str) -> str:
        if uri not in self._data:
            raise DocumentNotFoundError(uri)
        return self._data[uri]

    def store(self, uri: str, text: str) -> None:
        """Store ``text`` for ``uri``.

        Raises AlreadyStoredError when the content is byte-identical to
        what is already stored, so callers can skip analysis.
        """
        digest = content_hash(text)
        if self._hashes.get(uri) == digest:
            raise AlreadyStoredError(uri)
        self._data[uri] = text
        self._hashes[uri] = digest
        logger.debug(
            "event=document_stored uri=%s hash=%s chars=%d",
            uri,
            digest[:12],
            len(text),
        )

    def delete(self, uri: str) -> None:
        self._data.pop(uri, None)
        self._hashes.pop(uri, None)
        self._analysis.pop(uri, None)
        self._diagnostics.pop(uri, None)
        logger.debug("event=document_deleted uri=%s", uri)

    def forget_hash(self, uri: str) -> None:
        """Let the next store() of the same text through again.

        Used when an analysis cycle was cut short before it produced
        diagnostics for the stored text.
        """
        if self._hashes.pop(uri, None) is not None:
            logger.debug("event=document_hash_forgotten uri=%s", uri)

    def dump(self) -> dict[str, str]:
        return dict(self._data)

    def uris(self) -> list[str]:
        return list(self._data.keys())

    def store_analysis(self, uri: str, analysis: str) -> None:
        self._analysis[uri] = analysis

    def load_analysis(self, uri: str) -> str:
        if uri not in self._analysis:
            raise DocumentNotFoundError(uri, kind="analysis")
        return self._analysis[uri]

    def update_diagnostics(
        self, uri: str, diagnostics: list[Diagnostic]
    ) -> None:
        """Replace the whole diagnostic list for ``uri``."""
        self._diagnostics[uri] = list(diagnostics)
        logger.info(
            "event=diagnostics_updated uri=%s count=%d",
            uri,
            len(diagnostics),
        )
        for d in diagnostics:
            logger.debug(
                "event=diagnostic uri=%s line=%d rule=%s severity=%s",
                uri,
                d.line_number,
                d.rule,
                d.severity,
            )

    def get_diagnostics(self, uri: str) -> list[Diagnostic]:
        """Current diagnostics; ``[]`` means analysed with no findings."""
        if uri not in self._diagnostics:
            raise DocumentNotFoundError(uri, kind="diagnostics")
        return list(self._diagnostics[uri])
