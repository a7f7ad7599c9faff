"""Protocol for the content & diagnostic store.

Implementations satisfy this protocol structurally (no inheritance).
No implementation is required to lock: callers serialise
read-modify-write per uri.
"""

from typing import Protocol

from fuzzlsp.analysis.schemas import Diagnostic


class DocumentStore(Protocol):
    def load(self, uri: str) -> str: ...
    def store(self, uri: str, text: str) -> None: ...
    def delete(self, uri: str) -> None: ...
    def forget_hash(self, uri: str) -> None: ...
    def dump(self) -> dict[str, str]: ...
    def store_analysis(self, uri: str, analysis: str) -> None: ...
    def load_analysis(self, uri: str) -> str: ...
    def update_diagnostics(
        self, uri: str, diagnostics: list[Diagnostic]
    ) -> None: ...
    def get_diagnostics(self, uri: str) -> list[Diagnostic]: ...
