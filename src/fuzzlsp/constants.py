"""Shared constants — single source of truth for cross-module values.

StrEnum members are str-compatible, so settings files, log lines and
the diagnostic interchange JSON work unchanged.
"""

from __future__ import annotations

import sys
from enum import IntEnum, StrEnum

# ── String Enums ─────────────────────────────────────────


class BackendKind(StrEnum):
    """Backend selected once at startup.

    ``ollama`` sweeps whole chunks against a local model; ``openai``
    sweeps every coding-standard rule over every chunk.
    """

    OLLAMA = "ollama"
    OPENAI = "openai"


class Severity(StrEnum):
    """Severity labels the model is prompted to emit."""

    ADVISORY = "advisory"
    MANDATORY = "mandatory"


class CycleState(StrEnum):
    """States of one analysis cycle in the retry engine."""

    REQUESTING = "requesting"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    RETRYING = "retrying"
    FAILED = "failed"


class LspSeverity(IntEnum):
    """Editor-facing diagnostic severity (LSP numbering)."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


# ── Analysis ─────────────────────────────────────────────

MAX_ATTEMPTS = 5
DEFAULT_CHUNK_SIZE = 30

# ── LLM Request ──────────────────────────────────────────

LLM_MAX_OUTPUT_TOKENS = 4096
DEFAULT_MODEL_SEED = 42
# Smallest positive float: as deterministic as the provider allows
# while still being accepted where 0 is rejected.
DEFAULT_TEMPERATURE = sys.float_info.min
DEFAULT_LLM_TIMEOUT_SECONDS = 120

DEFAULT_OLLAMA_MODEL = "ollama/deepseek-coder"
DEFAULT_OPENAI_MODEL = "openai/gpt-4-1106-preview"

CONNECT_TEST_SNIPPET = "int main() { return 0; }"

# ── Completion ───────────────────────────────────────────

COMPLETION_CONTEXT_LINES = 3
COMPLETION_PLACEHOLDER = "<PROVIDE_SUGGESTION_HERE>"

# ── Formatting ───────────────────────────────────────────

DIAGNOSTIC_RANGE_END_CHARACTER = 5
SEARCH_URL_TEMPLATE = 'https://bing.com/search?q="{source}"'
SERVER_NAME = "fuzzlsp"
ERROR_TRUNCATION_CHARS = 200

# ── Ingestion ────────────────────────────────────────────

BINARY_DETECTION_BUFFER = 8192

# ── Logging ──────────────────────────────────────────────

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
