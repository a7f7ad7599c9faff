"""Singleton logging configuration — two-phase initialization.

Phase 1: setup_logging() — call BEFORE litellm is imported.
  Sets LITELLM_LOG env var and configures the root logger. Output goes
  to stderr or a log file, never stdout: an editor talking to the
  server over stdio owns stdout.

Phase 2: cleanup_third_party_handlers() — call AFTER all imports.
  Clears litellm's duplicate StreamHandlers added at import time.

Both phases are idempotent (guarded by module-level flags).
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers to suppress to WARNING
_SUPPRESSED_LOGGERS = (
    "LiteLLM",
    "LiteLLM Router",
    "LiteLLM Proxy",
    "openai._base_client",
    "httpx",
    "httpcore",
)

_phase1_done = False
_phase2_done = False


def setup_logging(
    level: str = "INFO", log_file: Path | None = None
) -> None:
    """Phase 1: Configure root logger and set env vars.

    Idempotent — second call is a no-op.
    """
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    os.environ.setdefault("LITELLM_LOG", "WARNING")

    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=[handler],
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def cleanup_third_party_handlers() -> None:
    """Phase 2: Remove litellm's duplicate StreamHandlers.

    litellm._logging adds its own handler to each logger, causing
    messages to appear twice (and on the wrong stream). Clear them and
    let records propagate to root only.

    Idempotent — second call is a no-op.
    """
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    for name in ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy"):
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True


def attach_log_file(log_file: Path) -> None:
    """Also write root logger output to ``log_file``.

    For callers that only learn the log path after phase 1 ran.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    logging.getLogger().addHandler(handler)


def apply_log_settings(level: str, log_file: Path | None = None) -> None:
    """Apply configured level and log file once settings are known.

    Phase 1 runs at import with defaults. With ``log_file`` set, the
    plain stderr handler is swapped for the file handler.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    if log_file is None:
        return
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    attach_log_file(log_file)
