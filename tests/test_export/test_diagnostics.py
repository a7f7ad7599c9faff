"""Tests for LSP and hover rendering of diagnostics."""

from __future__ import annotations

import json

import pytest

from fuzzlsp.analysis.schemas import Diagnostic
from fuzzlsp.constants import LspSeverity
from fuzzlsp.export.diagnostics import (
    build_diagnostic_report,
    diagnostic_to_json_markup,
    diagnostic_to_lsp,
    diagnostic_to_pretty_text,
    render_hover,
    to_lsp_severity,
)

URI = "file:///src/a.c"


def _diag(line: int = 3, **kwargs: str) -> Diagnostic:
    fields = {
        "uri": URI,
        "source": "MISRA C",
        "rule": "15.6",
        "severity": "mandatory",
        "description": "if body without braces",
        "recommendation": "Add braces",
    }
    fields.update(kwargs)
    return Diagnostic(line_number=line, **fields)


class TestSeverity:
    @pytest.mark.parametrize(
        ("severity", "expected"),
        [
            ("advisory", LspSeverity.WARNING),
            ("mandatory", LspSeverity.ERROR),
            ("required", LspSeverity.HINT),
            ("", LspSeverity.HINT),
            ("Mandatory", LspSeverity.HINT),
        ],
    )
    def test_mapping(self, severity: str, expected: LspSeverity) -> None:
        assert to_lsp_severity(severity) is expected

    def test_protocol_values(self) -> None:
        assert int(LspSeverity.ERROR) == 1
        assert int(LspSeverity.WARNING) == 2
        assert int(LspSeverity.HINT) == 4


class TestText:
    def test_pretty_text(self) -> None:
        assert diagnostic_to_pretty_text(_diag()) == (
            "\nSource: MISRA C\nSeverity: mandatory\nRecommendation: Add braces\n"
        )

    def test_json_markup(self) -> None:
        markup = diagnostic_to_json_markup(_diag())
        header, body = markup.split("\n", 1)
        assert header == "#### diagnostics"
        assert body.startswith("```json\n{\n  \"uri\"")
        assert body.endswith("\n```")
        payload = json.loads(body.removeprefix("```json\n").removesuffix("\n```"))
        assert list(payload) == [
            "uri",
            "line_number",
            "source",
            "rule",
            "severity",
            "description",
            "recommendation",
        ]


class TestLsp:
    def test_diagnostic_shape(self) -> None:
        lsp = diagnostic_to_lsp(_diag(line=3), "fuzzlsp")
        assert lsp["range"] == {
            "start": {"line": 2, "character": 0},
            "end": {"line": 2, "character": 5},
        }
        assert lsp["severity"] == 1
        assert lsp["code"] == "MISRA C 15.6"
        assert lsp["source"] == "fuzzlsp"
        assert lsp["message"] == "if body without braces"
        assert lsp["codeDescription"]["href"] == (
            'https://bing.com/search?q="MISRA%20C"'
        )
        related = lsp["relatedInformation"][0]
        assert related["location"]["uri"] == URI
        assert related["message"].startswith("\nSource: MISRA C\n")

    def test_report(self) -> None:
        report = build_diagnostic_report([_diag(1), _diag(2)], "srv")
        assert report["kind"] == "full"
        assert [i["range"]["start"]["line"] for i in report["items"]] == [0, 1]
        assert build_diagnostic_report([])["items"] == []


class TestHover:
    def test_matches_zero_based_line(self) -> None:
        text = render_hover([_diag(line=5)], 4)
        assert text.startswith("#### diagnostics")

    def test_no_match(self) -> None:
        assert render_hover([_diag(line=5)], 5) == ""
        assert render_hover([], 0) == ""

    def test_several_on_one_line(self) -> None:
        text = render_hover(
            [_diag(line=2, rule="15.6"), _diag(line=2, rule="14.4")], 1
        )
        assert text.count("#### diagnostics") == 2
        assert "```\n\n#### diagnostics" in text
