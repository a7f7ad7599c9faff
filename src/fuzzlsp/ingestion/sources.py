"""Resolve document uris to files on disk."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import unquote, urlparse

from fuzzlsp.constants import BINARY_DETECTION_BUFFER

_WINDOWS_DRIVE_RE = re.compile(r"^/[A-Za-z]:")


def uri_to_path(uri: str) -> Path:
    """Convert a ``file://`` uri (or a bare path) to a filesystem path.

    ``file:///C:/src/a.c`` becomes ``C:/src/a.c``.
    """
    parsed = urlparse(uri)
    if len(parsed.scheme) == 1:
        # Bare Windows path such as C:/src/a.c
        return Path(uri)
    if parsed.scheme not in ("", "file"):
        raise ValueError(f"unsupported uri scheme: {parsed.scheme!r}")
    path = unquote(parsed.path) if parsed.scheme else uri
    if _WINDOWS_DRIVE_RE.match(path):
        path = path[1:]
    return Path(path)


def is_binary(path: Path) -> bool:
    """Return True if the file appears to be binary (null byte in first N bytes)."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(BINARY_DETECTION_BUFFER)
        return b"\x00" in chunk
    except OSError:
        return True


def read_document(uri: str) -> str:
    """Read the text behind ``uri``; binary files are rejected."""
    path = uri_to_path(uri)
    if not path.is_file():
        raise FileNotFoundError(f"no such file: {path}")
    if is_binary(path):
        raise ValueError(f"not a text document: {path}")
    return path.read_text(encoding="utf-8", errors="replace")
