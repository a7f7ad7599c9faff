"""CLI entry point: ``fuzzlsp check``."""

from __future__ import annotations

# Phase 1: singleton logging, before any transitive litellm imports
from fuzzlsp.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

from fuzzlsp import __version__  # noqa: E402
from fuzzlsp.analysis.events import (  # noqa: E402
    CycleEvent,
    ProgressCallback,
)
from fuzzlsp.analysis.schemas import Diagnostic  # noqa: E402
from fuzzlsp.config import Settings  # noqa: E402
from fuzzlsp.constants import BackendKind, Severity  # noqa: E402
from fuzzlsp.logging_config import (  # noqa: E402
    apply_log_settings,
    cleanup_third_party_handlers,
)

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()

EXIT_FINDINGS = 1
EXIT_SETUP = 2


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"fuzzlsp {__version__}")
        return

    if args.command == "check":
        _run_check(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fuzzlsp",
        description=(
            "LLM-backed code diagnostics: "
            "checks source files against a coding standard."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser(
        "check",
        help="Analyse source files and print findings",
    )
    check.add_argument(
        "files",
        nargs="+",
        help="Source files to analyse",
    )
    check.add_argument(
        "--config",
        "-c",
        default=None,
        help="server_config.json to load before applying flags",
    )
    check.add_argument(
        "--backend",
        "-b",
        choices=[k.value for k in BackendKind],
        default=None,
        help="Backend strategy (default: from settings)",
    )
    check.add_argument(
        "--prompt-file",
        default=None,
        help="System prompt file",
    )
    check.add_argument(
        "--retry-prompt",
        default=None,
        help="Retry prompt file, sent when output is unparseable",
    )
    check.add_argument(
        "--connect-test",
        action="store_true",
        default=None,
        help="Send one test request before analysing",
    )
    check.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Lines per request chunk (default: 30)",
    )
    check.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Analysis attempts per file (default: 5)",
    )
    check.add_argument(
        "--logs",
        default=None,
        help="Write logs to this file instead of stderr",
    )
    check.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: INFO)",
    )
    check.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print analysis progress to stderr",
    )

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings from .env/environment or --config, then flag overrides."""
    overrides: dict[str, Any] = {
        "backend": args.backend,
        "prompt_file": args.prompt_file,
        "retry_prompt_file": args.retry_prompt,
        "connect_test": args.connect_test,
        "chunk_size": args.chunk_size,
        "max_attempts": args.max_attempts,
        "log_file": args.logs,
        "log_level": args.log_level,
    }
    if args.config:
        return Settings.from_json_file(Path(args.config), **overrides)
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def format_finding(path: Path | str, d: Diagnostic) -> str:
    """One report line: ``path:line: [severity] source rule: description``."""
    return (
        f"{path}:{d.line_number}: [{d.severity}] "
        f"{d.source} {d.rule}: {d.description}"
    )


def _run_check(args: argparse.Namespace) -> None:
    """Execute the check command."""
    from pydantic import ValidationError

    try:
        settings = _settings_from_args(args)
    except (RuntimeError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_SETUP)

    apply_log_settings(settings.log_level, settings.log_file)

    def on_progress(event: CycleEvent) -> None:
        if args.verbose:
            print(f"  {event.uri}: {event.label}", file=sys.stderr)

    paths = [Path(f) for f in args.files]
    code = asyncio.run(_check_files(paths, settings, on_progress))
    if code:
        sys.exit(code)


async def _check_files(
    paths: list[Path],
    settings: Settings,
    on_progress: ProgressCallback | None = None,
) -> int:
    """Analyse each file in turn; return the process exit status."""
    from fuzzlsp.ingestion.sources import read_document
    from fuzzlsp.resilience.errors import BackendConfigError
    from fuzzlsp.services.document_service import DocumentService

    try:
        service = DocumentService.from_settings(
            settings, on_progress=on_progress
        )
        await service.start()
    except BackendConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SETUP
    except Exception as e:
        print(f"Error: backend unavailable: {e}", file=sys.stderr)
        return EXIT_SETUP

    failed = False
    total = 0
    for path in paths:
        uri = path.resolve().as_uri()
        try:
            text = read_document(uri)
        except (OSError, ValueError) as e:
            print(f"{path}: skipped: {e}", file=sys.stderr)
            failed = True
            continue

        status = await service.did_open(uri, text)
        if not status.ok:
            print(f"{path}: analysis failed: {status.error}", file=sys.stderr)
            failed = True
            continue

        diagnostics = sorted(
            service.store.get_diagnostics(uri),
            key=lambda d: d.line_number,
        )
        for d in diagnostics:
            print(format_finding(path, d))
            if d.severity == Severity.MANDATORY:
                failed = True
        total += len(diagnostics)

    print(
        f"\n{total} finding(s) in {len(paths)} file(s)",
        file=sys.stderr,
    )
    return EXIT_FINDINGS if failed else 0


if __name__ == "__main__":
    main()
