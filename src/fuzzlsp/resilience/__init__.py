"""Error taxonomy, request cancellation and per-document locking."""

from fuzzlsp.resilience.cancellation import RequestScopes, RequestSlot
from fuzzlsp.resilience.errors import (
    AlreadyStoredError,
    BackendConfigError,
    BackendError,
    BackendNotReadyError,
    DocumentNotFoundError,
    ErrorClass,
    ExtractionError,
    FuzzLspError,
    RequestSupersededError,
    StoreError,
    classify_error,
)
from fuzzlsp.resilience.locks import KeyedLock

__all__ = [
    "AlreadyStoredError",
    "BackendConfigError",
    "BackendError",
    "BackendNotReadyError",
    "DocumentNotFoundError",
    "ErrorClass",
    "ExtractionError",
    "FuzzLspError",
    "KeyedLock",
    "RequestScopes",
    "RequestSlot",
    "RequestSupersededError",
    "StoreError",
    "classify_error",
]
