"""Single chat completion through litellm.

No retry and no error translation here: provider exceptions
(connection, auth, bad request) reach the caller exactly as litellm
raised them. Retrying is the analysis engine's job.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import litellm

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types: typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion


@dataclass(frozen=True)
class LLMCallResult:
    """Structured return from llm_call with token metadata."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


async def llm_call(
    model: str,
    messages: list[dict[str, str]],
    *,
    max_tokens: int,
    temperature: float,
    seed: int,
    timeout: int,
    api_base: str | None = None,
    api_key: str | None = None,
) -> LLMCallResult:
    """Send one chat completion request and return its text."""
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "seed": seed,
        "timeout": timeout,
    }
    if api_base:
        kwargs["api_base"] = api_base
    if api_key:
        kwargs["api_key"] = api_key

    prompt_chars = sum(len(m["content"]) for m in messages)
    logger.debug(
        "event=llm_request model=%s prompt_chars=%d", model, prompt_chars
    )
    t0 = time.perf_counter()
    response: Any = await _acompletion(**kwargs)

    usage: Any = getattr(response, "usage", None)
    content = str(response.choices[0].message.content or "")
    input_tokens = getattr(usage, "prompt_tokens", 0) or 0
    output_tokens = getattr(usage, "completion_tokens", 0) or 0
    logger.debug(
        "event=llm_response model=%s chars=%d input_tokens=%d"
        " output_tokens=%d duration_ms=%.0f",
        model,
        len(content),
        input_tokens,
        output_tokens,
        (time.perf_counter() - t0) * 1000,
    )
    return LLMCallResult(
        content=content,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )
