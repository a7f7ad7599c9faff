"""Document lifecycle service."""

from fuzzlsp.services.document_service import (
    DocumentService,
    SyncStatus,
    completion_prefix,
)

__all__ = ["DocumentService", "SyncStatus", "completion_prefix"]
