"""LLM utilities for the summarization workflow.

- Tiered model selection (Haiku/Sonnet/Opus) and ChatAnthropic construction
- Response text extraction across content-block formats
- GenerationClient: single-attempt generation with a classified error taxonomy
"""

from .models import ModelTier, get_default_model, get_llm, resolve_model
from .response_parsing import extract_response_content
from .generation import (
    MAX_PROMPT_CHARS,
    GenerationClient,
    classify_generation_error,
)

__all__ = [
    "ModelTier",
    "get_default_model",
    "get_llm",
    "resolve_model",
    "extract_response_content",
    "MAX_PROMPT_CHARS",
    "GenerationClient",
    "classify_generation_error",
]
