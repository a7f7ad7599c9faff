"""Diagnostic rendering for editors and reports."""

from fuzzlsp.export.diagnostics import (
    build_diagnostic_report,
    diagnostic_to_json_markup,
    diagnostic_to_lsp,
    diagnostic_to_pretty_text,
    render_hover,
    search_url,
    to_lsp_severity,
)

__all__ = [
    "build_diagnostic_report",
    "diagnostic_to_json_markup",
    "diagnostic_to_lsp",
    "diagnostic_to_pretty_text",
    "render_hover",
    "search_url",
    "to_lsp_severity",
]
