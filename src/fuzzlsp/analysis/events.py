"""Event types for analysis-cycle progress reporting."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from fuzzlsp.constants import CycleState


@dataclass(frozen=True)
class CycleEvent:
    """Typed event emitted on every state transition of a cycle."""

    uri: str
    state: CycleState
    attempt: int
    max_attempts: int
    message: str = ""

    @property
    def label(self) -> str:
        """Short display label, e.g. ``retrying 2/5``."""
        return f"{self.state} {self.attempt}/{self.max_attempts}"


ProgressCallback: TypeAlias = Callable[[CycleEvent], None]
