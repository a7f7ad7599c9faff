"""Environment-based configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from fuzzlsp.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_MODEL_SEED,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_TEMPERATURE,
    LLM_MAX_OUTPUT_TOKENS,
    LOG_LEVELS,
    MAX_ATTEMPTS,
    BackendKind,
)

logger = logging.getLogger(__name__)

# Keys of the legacy server_config.json → Settings field names
_JSON_KEY_MAP: dict[str, str] = {
    "prompt_file": "prompt_file",
    "retry_prompt": "retry_prompt_file",
    "backend": "backend",
    "connect_test": "connect_test",
}


class Settings(BaseSettings):
    """Reads from .env file and FUZZLSP_* environment variables."""

    # Backend
    backend: BackendKind = BackendKind.OLLAMA
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    # litellm reads OPENAI_API_KEY itself; accept it here too so the
    # startup check sees the same value.
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "openai_api_key", "FUZZLSP_OPENAI_API_KEY", "OPENAI_API_KEY"
        ),
    )
    api_base: str | None = None
    connect_test: bool = False

    # Prompts (opaque text files, read once at startup)
    prompt_file: Path | None = None
    retry_prompt_file: Path | None = None

    # Request parameters
    model_max_tokens: int = LLM_MAX_OUTPUT_TOKENS
    model_temperature: float = DEFAULT_TEMPERATURE
    model_seed: int = DEFAULT_MODEL_SEED
    llm_timeout_seconds: int = DEFAULT_LLM_TIMEOUT_SECONDS

    # Analysis
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_attempts: int = MAX_ATTEMPTS
    per_document_cancellation: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("backend", mode="before")
    @classmethod
    def _parse_backend(cls, v: Any) -> Any:
        """Accept any casing: ``OpenAI`` → ``openai``."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            if v not in LOG_LEVELS:
                raise ValueError(
                    f"must be one of {', '.join(LOG_LEVELS)}"
                )
        return v

    @field_validator("chunk_size", "max_attempts")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def model_name(self) -> str:
        """Model identifier (litellm provider/model) for the backend."""
        if self.backend is BackendKind.OPENAI:
            return self.openai_model
        return self.ollama_model

    @classmethod
    def from_json_file(cls, path: Path, **overrides: Any) -> Settings:
        """Load a server_config.json file; keyword overrides win."""
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RuntimeError(
                f'Failed to read config "{path}": {e}'
            ) from e
        if not isinstance(raw, dict):
            raise RuntimeError(
                f'Config file "{path}" must be a JSON object at top level'
            )

        data: dict[str, Any] = {}
        for key, value in raw.items():
            field_name = _JSON_KEY_MAP.get(key, key)
            if field_name in cls.model_fields and value not in ("", None):
                data[field_name] = value
            elif field_name not in cls.model_fields:
                logger.debug(
                    "event=config_key_ignored key=%s path=%s", key, path
                )
        data.update(
            {k: v for k, v in overrides.items() if v is not None}
        )
        return cls(**data)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "FUZZLSP_",
        "extra": "ignore",
        "populate_by_name": True,
        "protected_namespaces": (),
    }
