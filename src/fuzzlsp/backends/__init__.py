"""Text-generation backends — chunk sweep and rule sweep."""

from fuzzlsp.backends._llm_call import LLMCallResult, llm_call
from fuzzlsp.backends.base import AnalysisBackend, ChatBackend
from fuzzlsp.backends.chunk_sweep import ChunkSweepBackend
from fuzzlsp.backends.rule_sweep import RuleSweepBackend
from fuzzlsp.config import Settings
from fuzzlsp.constants import BackendKind

__all__ = [
    "AnalysisBackend",
    "ChatBackend",
    "ChunkSweepBackend",
    "LLMCallResult",
    "RuleSweepBackend",
    "create_backend",
    "llm_call",
]

_BACKENDS: dict[BackendKind, type[ChatBackend]] = {
    BackendKind.OLLAMA: ChunkSweepBackend,
    BackendKind.OPENAI: RuleSweepBackend,
}


def create_backend(settings: Settings) -> ChatBackend:
    """Build the backend selected by ``settings.backend``."""
    return _BACKENDS[settings.backend](settings)
