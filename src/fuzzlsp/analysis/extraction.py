"""Turn free-form model output into diagnostics.

Model output is not guaranteed to be JSON. Findings are recovered by
scanning the raw text for substrings shaped like a JSON array of
objects and parsing each one independently:

- a span that is not valid JSON (after light cleanup) is skipped
- an array item that does not validate as a Diagnostic is skipped
- everything else is kept, in the order it appeared

The span matcher is pluggable so the matching strategy can change
without touching the retry engine.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any, TypeAlias

from pydantic import ValidationError

from fuzzlsp.analysis.schemas import Diagnostic, ExtractionResult
from fuzzlsp.constants import ERROR_TRUNCATION_CHARS

logger = logging.getLogger(__name__)

SpanMatcher: TypeAlias = Callable[[str], list[str]]

_ARRAY_START_RE = re.compile(r"\[\s*\{")
# Single-level array of flat objects; cannot see past a "]" in a value.
_SIMPLE_ARRAY_RE = re.compile(r"\[\s*\{[^\]]+\}\s*\]")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_CLOSERS = {"[": "]", "{": "}"}


def find_array_spans(text: str) -> list[str]:
    """Return non-overlapping ``[{ ... }]`` spans, left to right.

    Brackets are matched with a stack and quoted strings are skipped,
    so brackets inside descriptions do not end a span early. A start
    that never closes (or closes with the wrong bracket) is abandoned
    and scanning resumes just after it.
    """
    spans: list[str] = []
    pos = 0
    while True:
        match = _ARRAY_START_RE.search(text, pos)
        if match is None:
            return spans
        start = match.start()
        end = _balanced_end(text, start)
        if end is None:
            pos = start + 1
            continue
        spans.append(text[start:end])
        pos = end


def regex_array_spans(text: str) -> list[str]:
    """Flat-regex matcher: cheaper, but blind to nested brackets."""
    return _SIMPLE_ARRAY_RE.findall(text)


def _balanced_end(text: str, start: int) -> int | None:
    stack: list[str] = []
    in_str = False
    esc = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ("]", "}"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return i + 1
    return None


def remove_trailing_commas(text: str) -> str:
    """Remove trailing commas from JSON arrays/objects."""
    prev = None
    while prev != text:
        prev = text
        text = _TRAILING_COMMA_RE.sub(r"\1", text)
    return text


def _load_span(span: str) -> Any:
    try:
        return json.loads(span)
    except json.JSONDecodeError:
        return json.loads(remove_trailing_commas(span))


def extract_diagnostics(
    raw_text: str, matcher: SpanMatcher = find_array_spans
) -> ExtractionResult:
    """Parse every array-shaped span of ``raw_text`` into diagnostics.

    Never raises on bad input; check ``result.ok``.
    """
    result = ExtractionResult()
    spans = matcher(raw_text)
    result.spans_found = len(spans)

    for span in spans:
        try:
            data = _load_span(span)
        except json.JSONDecodeError as e:
            result.spans_rejected += 1
            logger.warning(
                "event=span_parse_failed error=%s span=%r",
                e,
                span[:ERROR_TRUNCATION_CHARS],
            )
            continue
        if not isinstance(data, list):
            result.spans_rejected += 1
            logger.warning(
                "event=span_not_array type=%s", type(data).__name__
            )
            continue

        for item in data:
            try:
                result.diagnostics.append(Diagnostic.model_validate(item))
            except ValidationError as e:
                result.items_rejected += 1
                logger.warning(
                    "event=diagnostic_invalid errors=%d item=%r",
                    e.error_count(),
                    str(item)[:ERROR_TRUNCATION_CHARS],
                )

    logger.debug(
        "event=extraction_done spans=%d rejected_spans=%d"
        " rejected_items=%d diagnostics=%d",
        result.spans_found,
        result.spans_rejected,
        result.items_rejected,
        len(result.diagnostics),
    )
    return result
