"""Error taxonomy and classification.

Store errors are control flow (duplicate content, unknown uri).
Backend errors are raised by this package around provider calls;
provider exceptions themselves (litellm, httpx) propagate unwrapped.
Extraction errors end an analysis cycle after every attempt failed.

``classify_error`` tags provider failures for structured logging:
- which failures are transient vs permanent
- informative messages (timeout vs auth vs server)
"""

from __future__ import annotations

import asyncio
import re
from enum import Enum

from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)


class FuzzLspError(Exception):
    """Root of all errors raised by fuzzlsp itself."""


# ── Store ────────────────────────────────────────────────


class StoreError(FuzzLspError):
    """Base class for document store failures."""


class AlreadyStoredError(StoreError):
    """Content hash matches what is already stored — nothing to do."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"document ({uri}) already stored")
        self.uri = uri


class DocumentNotFoundError(StoreError):
    """No entry of the requested kind exists for the uri."""

    def __init__(self, uri: str, kind: str = "document") -> None:
        super().__init__(f"{kind} ({uri}) not found")
        self.uri = uri
        self.kind = kind


# ── Backend ──────────────────────────────────────────────


class BackendError(FuzzLspError):
    """Base class for backend failures raised by fuzzlsp."""


class BackendConfigError(BackendError):
    """Backend prerequisites are missing (prompt file, API key)."""


class BackendNotReadyError(BackendError):
    """A request was issued before ``start()`` completed."""


class RequestSupersededError(BackendError):
    """The in-flight request was cancelled by a newer one."""


# ── Extraction ───────────────────────────────────────────


class ExtractionError(FuzzLspError):
    """No parseable diagnostics after exhausting every attempt."""

    def __init__(self, uri: str, attempts: int) -> None:
        super().__init__(
            f"no valid diagnostics for {uri} after {attempts} attempt(s)"
        )
        self.uri = uri
        self.attempts = attempts


# ── Classification ───────────────────────────────────────


class ErrorClass(Enum):
    TRANSIENT = "transient"  # rate limited, connection refused or reset
    SERVER = "server"  # provider-side 5xx
    TIMEOUT = "timeout"  # deadline exceeded
    CLIENT = "client"  # bad request, auth, unknown model
    UNKNOWN = "unknown"


# Checked in order: litellm's Timeout carries status 408 and its
# APIConnectionError carries 500, so the type decides before the code.
_LITELLM_CLASSES: tuple[tuple[type[BaseException], ErrorClass], ...] = (
    (Timeout, ErrorClass.TIMEOUT),
    (RateLimitError, ErrorClass.TRANSIENT),
    (APIConnectionError, ErrorClass.TRANSIENT),
    (ServiceUnavailableError, ErrorClass.SERVER),
    (InternalServerError, ErrorClass.SERVER),
    (AuthenticationError, ErrorClass.CLIENT),
    (PermissionDeniedError, ErrorClass.CLIENT),
    (NotFoundError, ErrorClass.CLIENT),
    (BadRequestError, ErrorClass.CLIENT),
)

_HTTP_CODE = re.compile(r"\b([45]\d\d)\b")


def _from_status(status_code: int) -> ErrorClass | None:
    if status_code == 408:
        return ErrorClass.TIMEOUT
    if status_code == 429:
        return ErrorClass.TRANSIENT
    if 400 <= status_code < 500:
        return ErrorClass.CLIENT
    if 500 <= status_code < 600:
        return ErrorClass.SERVER
    return None


def classify_error(error: BaseException) -> ErrorClass:
    """Classify a provider failure for the ``error_class`` log field.

    litellm exception types first, then stdlib timeout and connection
    errors, then an integer ``status_code`` attribute. Messages are
    only consulted for exceptions that carry none of these.
    """
    for exc_type, error_class in _LITELLM_CLASSES:
        if isinstance(error, exc_type):
            return error_class

    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorClass.TRANSIENT

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        by_status = _from_status(status_code)
        if by_status is not None:
            return by_status

    msg = str(error).lower()
    if "timed out" in msg or "timeout" in msg:
        return ErrorClass.TIMEOUT
    if "rate limit" in msg or "connection refused" in msg:
        return ErrorClass.TRANSIENT
    match = _HTTP_CODE.search(msg)
    if match is not None:
        return _from_status(int(match.group(1))) or ErrorClass.UNKNOWN

    return ErrorClass.UNKNOWN
