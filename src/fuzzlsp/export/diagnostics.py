"""Render diagnostics for editors: LSP payloads, hover markdown, text.

Line numbers in ``Diagnostic`` are 1-based; every LSP position produced
here is 0-based.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from fuzzlsp.analysis.schemas import Diagnostic
from fuzzlsp.constants import (
    DIAGNOSTIC_RANGE_END_CHARACTER,
    SEARCH_URL_TEMPLATE,
    SERVER_NAME,
    LspSeverity,
    Severity,
)

_SEVERITY_MAP: dict[str, LspSeverity] = {
    Severity.ADVISORY: LspSeverity.WARNING,
    Severity.MANDATORY: LspSeverity.ERROR,
}


def to_lsp_severity(severity: str) -> LspSeverity:
    """Map a model-reported severity; unknown values become hints."""
    return _SEVERITY_MAP.get(severity, LspSeverity.HINT)


def diagnostic_to_pretty_text(d: Diagnostic) -> str:
    return (
        f"\nSource: {d.source}\n"
        f"Severity: {d.severity}\n"
        f"Recommendation: {d.recommendation}\n"
    )


def diagnostic_to_json_markup(d: Diagnostic) -> str:
    """Markdown block with the diagnostic as indented JSON."""
    body = json.dumps(d.model_dump(), indent=2, ensure_ascii=False)
    return f"#### diagnostics\n```json\n{body}\n```"


def search_url(source: str) -> str:
    return SEARCH_URL_TEMPLATE.format(source=quote(source))


def diagnostic_to_lsp(
    d: Diagnostic,
    server_name: str = SERVER_NAME,
) -> dict[str, Any]:
    """Convert to an LSP ``Diagnostic`` object."""
    line = d.line_number - 1
    range_ = {
        "start": {"line": line, "character": 0},
        "end": {"line": line, "character": DIAGNOSTIC_RANGE_END_CHARACTER},
    }
    return {
        "range": range_,
        "severity": int(to_lsp_severity(d.severity)),
        "code": f"{d.source} {d.rule}",
        "codeDescription": {"href": search_url(d.source)},
        "source": server_name,
        "message": d.description,
        "relatedInformation": [
            {
                "location": {"uri": d.uri, "range": range_},
                "message": diagnostic_to_pretty_text(d),
            }
        ],
    }


def build_diagnostic_report(
    diagnostics: list[Diagnostic],
    server_name: str = SERVER_NAME,
) -> dict[str, Any]:
    """Full document diagnostic report for a pull-diagnostics request."""
    return {
        "kind": "full",
        "items": [diagnostic_to_lsp(d, server_name) for d in diagnostics],
    }


def render_hover(diagnostics: list[Diagnostic], line: int) -> str:
    """Markdown for every diagnostic on 0-based ``line``; ``""`` if none."""
    blocks = [
        diagnostic_to_json_markup(d)
        for d in diagnostics
        if d.line_number - 1 == line
    ]
    return "\n\n".join(blocks)
