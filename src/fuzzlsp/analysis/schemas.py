"""Pydantic models for analysis output.

Field names of ``Diagnostic`` are the interchange contract shared with
the prompt files and every consumer (hover, pull diagnostics, batch
reports): ``uri, line_number, source, rule, severity, description,
recommendation``.
"""

from pydantic import BaseModel, Field

from fuzzlsp.constants import CycleState


class Diagnostic(BaseModel):
    """A single finding attached to a document line."""

    uri: str = ""
    line_number: int = Field(ge=1)  # 1-based
    source: str = ""
    rule: str = ""
    # advisory, mandatory; anything else is rendered as a hint
    severity: str = ""
    description: str = ""
    recommendation: str = ""

    model_config = {"extra": "ignore"}


class ExtractionResult(BaseModel):
    """Outcome of turning raw model text into diagnostics."""

    diagnostics: list[Diagnostic] = Field(
        default_factory=lambda: list[Diagnostic]()
    )
    spans_found: int = 0
    spans_rejected: int = 0
    items_rejected: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.diagnostics)


class AnalysisOutcome(BaseModel):
    """Final result of one successful analysis cycle."""

    uri: str
    state: CycleState
    attempts: int = 0
    diagnostics: list[Diagnostic] = Field(
        default_factory=lambda: list[Diagnostic]()
    )
