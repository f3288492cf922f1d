"""Shared utilities for document workflows."""

from .text_utils import (
    count_words,
    get_preview,
    split_paragraphs,
    split_sentences,
    split_words,
)
from .llm_utils import (
    GenerationClient,
    ModelTier,
    get_llm,
)
from .retry_utils import backoff_delay, with_retry
from .async_utils import run_in_batches

__all__ = [
    # Text utilities
    "count_words",
    "get_preview",
    "split_paragraphs",
    "split_sentences",
    "split_words",
    # LLM utilities
    "GenerationClient",
    "ModelTier",
    "get_llm",
    # Async helpers
    "backoff_delay",
    "with_retry",
    "run_in_batches",
]
