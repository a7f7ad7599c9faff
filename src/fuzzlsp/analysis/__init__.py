"""Diagnostic extraction and the retrying analysis engine."""

from fuzzlsp.analysis.engine import AnalysisEngine
from fuzzlsp.analysis.events import CycleEvent, ProgressCallback
from fuzzlsp.analysis.extraction import (
    extract_diagnostics,
    find_array_spans,
    regex_array_spans,
)
from fuzzlsp.analysis.schemas import (
    AnalysisOutcome,
    Diagnostic,
    ExtractionResult,
)

__all__ = [
    "AnalysisEngine",
    "AnalysisOutcome",
    "CycleEvent",
    "Diagnostic",
    "ExtractionResult",
    "ProgressCallback",
    "extract_diagnostics",
    "find_array_spans",
    "regex_array_spans",
]
