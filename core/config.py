"""Docsum configuration and environment setup.

This module provides centralized configuration for the summarization
pipeline, including development mode detection, LangSmith tracing setup
and the tunable pipeline parameters.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def is_dev_mode() -> bool:
    """Check if running in development mode.

    Returns:
        True if DOCSUM_MODE is set to 'dev', False otherwise.
    """
    return os.getenv("DOCSUM_MODE", "prod").lower() == "dev"


def configure_langsmith() -> None:
    """Configure LangSmith tracing based on DOCSUM_MODE.

    When DOCSUM_MODE=dev:
        - Enables LangSmith tracing
        - Sets project to 'docsum-dev'

    When DOCSUM_MODE=prod (or unset):
        - Disables LangSmith tracing

    This function is idempotent and safe to call multiple times.
    """
    if is_dev_mode():
        os.environ.setdefault("LANGSMITH_TRACING", "true")
        os.environ.setdefault("LANGSMITH_PROJECT", "docsum-dev")
    else:
        os.environ["LANGSMITH_TRACING"] = "false"


@dataclass
class SummarizationConfig:
    """Tunable parameters for the summarization pipeline.

    Environment Variables:
        DOCSUM_CONCURRENCY_LIMIT: Chunk jobs dispatched per batch (default: 5)
        DOCSUM_MAX_CHUNK_SIZE: Maximum characters per chunk (default: 8000)
        DOCSUM_MAX_RETRIES: In-batch retries per chunk job (default: 2)
        DOCSUM_RETRY_BACKOFF: Base backoff delay in seconds (default: 1.0)
        DOCSUM_BATCH_PAUSE: Pause between batches in seconds (default: 1.0)
        DOCSUM_COVERAGE_THRESHOLD: Minimum fraction of sections the combined
            summary must reference (default: 0.7)
        DOCSUM_TEMPERATURE: Sampling temperature for generation (default: 0.2)
    """

    # Batching
    concurrency_limit: int = field(
        default_factory=lambda: int(os.environ.get("DOCSUM_CONCURRENCY_LIMIT", "5"))
    )
    batch_pause_seconds: float = field(
        default_factory=lambda: float(os.environ.get("DOCSUM_BATCH_PAUSE", "1.0"))
    )

    # Chunking
    max_chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("DOCSUM_MAX_CHUNK_SIZE", "8000"))
    )

    # Retry behavior
    max_retries: int = field(
        default_factory=lambda: int(os.environ.get("DOCSUM_MAX_RETRIES", "2"))
    )
    retry_backoff_base: float = field(
        default_factory=lambda: float(os.environ.get("DOCSUM_RETRY_BACKOFF", "1.0"))
    )

    # Repair pass and fallback extracts
    repair_chunk_chars: int = 4000
    fallback_preview_chars: int = 500

    # Overview and reduction
    overview_preview_chars: int = 5000
    combine_word_budget: int = 2000
    combine_max_tokens: int = 4096
    # Policy knob, not a correctness guarantee
    coverage_threshold: float = field(
        default_factory=lambda: float(
            os.environ.get("DOCSUM_COVERAGE_THRESHOLD", "0.7")
        )
    )

    temperature: float = field(
        default_factory=lambda: float(os.environ.get("DOCSUM_TEMPERATURE", "0.2"))
    )

    def __post_init__(self) -> None:
        if self.concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        if self.max_chunk_size < 1:
            raise ValueError("max_chunk_size must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if not 0.0 <= self.coverage_threshold <= 1.0:
            raise ValueError("coverage_threshold must be between 0 and 1")


_config: SummarizationConfig | None = None


def get_summarization_config() -> SummarizationConfig:
    """Get global SummarizationConfig instance."""
    global _config
    if _config is None:
        _config = SummarizationConfig()
    return _config
