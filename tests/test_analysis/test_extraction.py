"""Tests for turning raw model output into diagnostics."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from fuzzlsp.analysis.extraction import (
    extract_diagnostics,
    find_array_spans,
    regex_array_spans,
    remove_trailing_commas,
)


class TestFindArraySpans:
    def test_span_inside_prose(self) -> None:
        text = 'Here you go: [{"a": 1}] done.'
        assert find_array_spans(text) == ['[{"a": 1}]']

    def test_multiple_spans_in_order(self) -> None:
        text = '[{"a": 1}]\nchunk two\n[ {"b": 2}, {"c": 3} ]'
        assert find_array_spans(text) == [
            '[{"a": 1}]',
            '[ {"b": 2}, {"c": 3} ]',
        ]

    def test_brackets_inside_strings(self) -> None:
        text = '[{"description": "index a[i] out of range ]"}]'
        assert find_array_spans(text) == [text]

    def test_nested_array_value(self) -> None:
        text = '[{"lines": [1, 2]}]'
        assert find_array_spans(text) == [text]
        # The flat regex stops at the first "]".
        assert regex_array_spans(text) == []

    def test_plain_arrays_ignored(self) -> None:
        assert find_array_spans("values [1, 2, 3] and []") == []

    def test_unclosed_start_is_skipped(self) -> None:
        text = '[{"a": 1} oops\n[{"b": 2}]'
        assert find_array_spans(text) == ['[{"b": 2}]']


class TestRemoveTrailingCommas:
    def test_object_and_array(self) -> None:
        assert remove_trailing_commas('[{"a": 1,},]') == '[{"a": 1}]'


class TestExtractDiagnostics:
    def test_valid_output(
        self,
        make_item: Callable[..., dict[str, Any]],
        make_raw: Callable[..., str],
    ) -> None:
        result = extract_diagnostics(make_raw(make_item(3), make_item(7)))
        assert result.ok
        assert [d.line_number for d in result.diagnostics] == [3, 7]
        assert result.diagnostics[0].source == "MISRA C"

    def test_no_json_is_not_ok(self) -> None:
        result = extract_diagnostics("The code looks fine to me.")
        assert not result.ok
        assert result.spans_found == 0

    def test_empty_array_is_not_ok(self) -> None:
        assert not extract_diagnostics("[]").ok

    def test_malformed_span_skipped_valid_kept(
        self, make_item: Callable[..., dict[str, Any]]
    ) -> None:
        """One bad span among good ones: only the good ones survive."""
        good = json.dumps([make_item(2)])
        raw = f'{good}\n[{{"line_number": 5, oops}}]\n{good}'
        result = extract_diagnostics(raw)
        assert result.spans_found == 3
        assert result.spans_rejected == 1
        assert [d.line_number for d in result.diagnostics] == [2, 2]

    def test_trailing_comma_repaired(self) -> None:
        raw = '[{"line_number": 4, "rule": "8.4",},]'
        result = extract_diagnostics(raw)
        assert result.ok
        assert result.diagnostics[0].rule == "8.4"

    def test_invalid_item_skipped(
        self, make_item: Callable[..., dict[str, Any]]
    ) -> None:
        raw = json.dumps([make_item(1), {"line_number": 0}, make_item(6)])
        result = extract_diagnostics(raw)
        assert result.items_rejected == 1
        assert [d.line_number for d in result.diagnostics] == [1, 6]

    def test_unknown_fields_ignored(
        self, make_item: Callable[..., dict[str, Any]]
    ) -> None:
        raw = json.dumps([make_item(1, confidence="high")])
        result = extract_diagnostics(raw)
        assert result.ok
        assert "confidence" not in result.diagnostics[0].model_dump()

    def test_regex_matcher_pluggable(
        self, make_item: Callable[..., dict[str, Any]]
    ) -> None:
        raw = "x " + json.dumps([make_item(9)])
        result = extract_diagnostics(raw, regex_array_spans)
        assert [d.line_number for d in result.diagnostics] == [9]
