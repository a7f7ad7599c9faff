"""Shared test fixtures: prompt files, settings, a scripted backend."""

import os

# Force demo API keys for all tests: no real LLM calls.
os.environ["OPENAI_API_KEY"] = "for-demo-purposes-only"

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from fuzzlsp.config import Settings
from fuzzlsp.constants import BackendKind
from fuzzlsp.store.memory import InMemoryDocumentStore

SYSTEM_PROMPT = "You are a C code reviewer. Reply with a JSON array."
RETRY_PROMPT = "Your last answer was not valid JSON. Reply with JSON only."


class StubBackend:
    """AnalysisBackend with scripted responses and recorded calls.

    Each ``analyse_document`` call pops the next scripted item: a string
    is returned as raw model output, an exception is raised. When the
    script runs out the backend answers with an empty string.
    """

    kind = BackendKind.OLLAMA

    def __init__(
        self,
        responses: list[str | BaseException] | None = None,
        completions: list[str] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.completions = list(completions or [])
        self.calls: list[tuple[str, str, str]] = []
        self.completion_calls: list[tuple[str, str, str]] = []
        self.released: list[str] = []
        self.started = False

    async def start(self) -> None:
        self.started = True

    async def analyse_document(
        self, uri: str, text: str, *, instruction: str = ""
    ) -> str:
        self.calls.append((uri, text, instruction))
        if not self.responses:
            return ""
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def complete_code(
        self, uri: str, prefix: str, system_prompt: str
    ) -> list[str]:
        self.completion_calls.append((uri, prefix, system_prompt))
        return list(self.completions)

    def release(self, uri: str) -> None:
        self.released.append(uri)


def diagnostic_item(
    line_number: int = 1,
    *,
    rule: str = "15.6",
    severity: str = "mandatory",
    **extra: Any,
) -> dict[str, Any]:
    """One diagnostic object as the model would emit it."""
    item: dict[str, Any] = {
        "line_number": line_number,
        "source": "MISRA C",
        "rule": rule,
        "severity": severity,
        "description": "Body of if must be a compound statement",
        "recommendation": "Add braces",
    }
    item.update(extra)
    return item


def raw_output(*items: dict[str, Any], prose: str = "Findings:") -> str:
    """Model output: some prose followed by a JSON array of findings."""
    return f"{prose}\n{json.dumps(list(items))}\nHope this helps."


@pytest.fixture
def prompt_files(tmp_path: Path) -> tuple[Path, Path]:
    system = tmp_path / "prompt.txt"
    retry = tmp_path / "retry_prompt.txt"
    system.write_text(SYSTEM_PROMPT, encoding="utf-8")
    retry.write_text(RETRY_PROMPT, encoding="utf-8")
    return system, retry


@pytest.fixture
def settings(prompt_files: tuple[Path, Path]) -> Settings:
    system, retry = prompt_files
    return Settings(
        prompt_file=system,
        retry_prompt_file=retry,
        openai_api_key="for-demo-purposes-only",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def make_backend() -> Callable[..., StubBackend]:
    return StubBackend


@pytest.fixture
def make_item() -> Callable[..., dict[str, Any]]:
    return diagnostic_item


@pytest.fixture
def make_raw() -> Callable[..., str]:
    return raw_output
