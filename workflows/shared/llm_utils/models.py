"""Model tier definitions and LLM initialization."""

import os
from enum import Enum
from typing import Any

from dotenv import load_dotenv

load_dotenv()

from core.config import configure_langsmith

configure_langsmith()

from langchain_anthropic import ChatAnthropic


class ModelTier(Enum):
    """Model tiers for different task complexities.

    HAIKU: Cheap, fast section summaries
    SONNET: Default for summarization and reduction
    OPUS: Long or dense documents where quality matters more than cost
    """
    HAIKU = "claude-haiku-4-5-20251001"
    SONNET = "claude-sonnet-4-5-20250929"
    OPUS = "claude-opus-4-5-20251101"


def get_default_model() -> str:
    """Model identifier from DOCSUM_DEFAULT_MODEL, else the Sonnet tier."""
    return os.getenv("DOCSUM_DEFAULT_MODEL") or ModelTier.SONNET.value


def resolve_model(model: str | ModelTier | None) -> str:
    """Normalize a tier, a tier name ("haiku") or a raw model id to a model id."""
    if model is None:
        return get_default_model()
    if isinstance(model, ModelTier):
        return model.value
    tier = ModelTier.__members__.get(model.upper())
    return tier.value if tier else model


def get_llm(
    model: str | ModelTier | None = None,
    max_tokens: int = 4096,
    temperature: float = 0.2,
) -> ChatAnthropic:
    """
    Get a configured Anthropic Claude chat model.

    Args:
        model: Tier, tier name or full model identifier (default: get_default_model())
        max_tokens: Maximum output tokens
        temperature: Sampling temperature

    Returns:
        ChatAnthropic instance

    Example:
        llm = get_llm(ModelTier.HAIKU, max_tokens=1024)
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY not set")

    kwargs: dict[str, Any] = {
        "model": resolve_model(model),
        "api_key": api_key,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }

    return ChatAnthropic(**kwargs)
