"""Content & diagnostic store."""

from fuzzlsp.store.memory import InMemoryDocumentStore, content_hash
from fuzzlsp.store.protocols import DocumentStore

__all__ = ["DocumentStore", "InMemoryDocumentStore", "content_hash"]
