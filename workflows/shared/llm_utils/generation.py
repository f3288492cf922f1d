"""Single-attempt text generation with classified failures.

GenerationClient sends one prompt to the chat model and either returns
text or raises one of the GenerationError subclasses from core.errors.
Retry policy belongs to the caller, which uses the error's `retryable`
flag to decide.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

import httpx

from core.errors import (
    AuthInvalidError,
    GenerationError,
    GenerationTimeoutError,
    RateLimitedError,
    RequestTooLargeError,
    UnknownGenerationError,
)
from workflows.shared.token_utils import (
    estimate_tokens_fast,
    exceeds_token_limit,
    get_safe_limit_for_model,
)

from .models import get_llm, resolve_model
from .response_parsing import extract_response_content

logger = logging.getLogger(__name__)

# Prompt ceiling in characters, checked before any backend call
MAX_PROMPT_CHARS = 200_000

_RATE_LIMIT_MARKERS = ("rate limit", "rate_limit", "too many requests", "overloaded")
_QUOTA_MARKERS = ("quota", "credit balance")
_AUTH_MARKERS = (
    "authentication",
    "unauthorized",
    "permission denied",
    "invalid api key",
    "invalid x-api-key",
    "api_key",
)
_TOO_LARGE_MARKERS = (
    "prompt is too long",
    "context length",
    "context_length",
    "context window",
    "maximum context",
    "too many tokens",
    "token limit",
    "exceeds the maximum",
    "request too large",
    "request_too_large",
)
_TIMEOUT_MARKERS = ("timeout", "timed out")


def _status_code(error: Exception) -> Optional[int]:
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def classify_generation_error(error: Exception) -> GenerationError:
    """Map a backend exception onto the GenerationError taxonomy.

    HTTP status wins when present; otherwise the message is searched for
    known substrings. Unmatched errors become UnknownGenerationError.
    """
    if isinstance(error, GenerationError):
        return error

    message = str(error) or error.__class__.__name__
    lowered = message.lower()
    status = _status_code(error)

    if status == 429 or any(m in lowered for m in _RATE_LIMIT_MARKERS):
        quota = any(m in lowered for m in _QUOTA_MARKERS)
        return RateLimitedError(message, status_code=status, quota=quota)
    if any(m in lowered for m in _QUOTA_MARKERS):
        return RateLimitedError(message, status_code=status, quota=True)
    if status in (401, 403) or any(m in lowered for m in _AUTH_MARKERS):
        return AuthInvalidError(message, status_code=status)
    if status == 413 or any(m in lowered for m in _TOO_LARGE_MARKERS):
        return RequestTooLargeError(message, status_code=status)
    if (
        status in (408, 504)
        or isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException))
        or any(m in lowered for m in _TIMEOUT_MARKERS)
    ):
        return GenerationTimeoutError(message, status_code=status)
    return UnknownGenerationError(message, status_code=status)


class GenerationClient:
    """Thin policy wrapper around the chat model backend.

    Stateless apart from read-only settings, so one instance can be shared
    by every concurrent chunk job.

    Args:
        llm_factory: Builds a chat model from (model, max_tokens, temperature).
            Defaults to get_llm (ChatAnthropic).
        temperature: Sampling temperature for every call
        default_model: Model used when generate() gets none
        max_prompt_chars: Prompts longer than this are rejected up front
        max_prompt_tokens: Token ceiling for prompts (default: model safe limit)
    """

    def __init__(
        self,
        llm_factory: Callable[..., Any] = get_llm,
        temperature: float = 0.2,
        default_model: Optional[str] = None,
        max_prompt_chars: int = MAX_PROMPT_CHARS,
        max_prompt_tokens: Optional[int] = None,
    ):
        self._llm_factory = llm_factory
        self.temperature = temperature
        self.default_model = default_model
        self.max_prompt_chars = max_prompt_chars
        self.max_prompt_tokens = max_prompt_tokens

    def _preflight(self, prompt: str, model_id: str) -> None:
        if len(prompt) > self.max_prompt_chars:
            raise RequestTooLargeError(
                f"Prompt has {len(prompt):,} chars, limit is {self.max_prompt_chars:,}"
            )
        limit = self.max_prompt_tokens or get_safe_limit_for_model(model_id)
        if exceeds_token_limit(prompt, limit):
            raise RequestTooLargeError(f"Prompt exceeds {limit:,} token limit")

    async def generate(
        self,
        prompt: str,
        max_output_tokens: int,
        model: Optional[str] = None,
    ) -> str:
        """Generate text for one prompt. Single attempt.

        Raises:
            GenerationError subclass describing the failure.
        """
        model_id = resolve_model(model or self.default_model)
        self._preflight(prompt, model_id)

        logger.debug(
            f"Generating with {model_id}: ~{estimate_tokens_fast(prompt, with_safety_margin=False):,} "
            f"prompt tokens, max_output_tokens={max_output_tokens}"
        )

        try:
            llm = self._llm_factory(
                model=model_id,
                max_tokens=max_output_tokens,
                temperature=self.temperature,
            )
            response = await llm.ainvoke([{"role": "user", "content": prompt}])
        except Exception as e:
            classified = classify_generation_error(e)
            logger.warning(
                f"Generation failed ({classified.__class__.__name__}): {classified.message}"
            )
            raise classified from e

        text = extract_response_content(response)
        if not text:
            raise UnknownGenerationError("AI service returned empty content")
        return text
