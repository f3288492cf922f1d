"""Token utilities for prompt budget checks.

Provides a quick character-based estimate (with safety margin) and an
accurate tiktoken-based count for the cases where the estimate is close to
a limit.
"""

import logging
from functools import lru_cache

import tiktoken

logger = logging.getLogger(__name__)

# =============================================================================
# Model Context Limits
# =============================================================================
HAIKU_MAX_TOKENS = 200_000
SONNET_MAX_TOKENS = 200_000
OPUS_MAX_TOKENS = 200_000

# Leave headroom for the response and message overhead
HAIKU_SAFE_LIMIT = 150_000
SONNET_SAFE_LIMIT = 150_000
OPUS_SAFE_LIMIT = 150_000

# =============================================================================
# Estimation Constants
# =============================================================================
CHARS_PER_TOKEN = 4
SAFETY_MARGIN = 0.30


@lru_cache(maxsize=1)
def _get_encoding():
    """cl100k_base encoding, loaded once."""
    return tiktoken.get_encoding("cl100k_base")


def count_tokens_accurate(text: str) -> int:
    """Count tokens with tiktoken.

    ~10x slower than estimate_tokens_fast; use for limit decisions only.
    """
    if not text:
        return 0
    return len(_get_encoding().encode(text))


def estimate_tokens_fast(text: str, with_safety_margin: bool = True) -> int:
    """Quick token estimate from character count.

    Args:
        text: Text to estimate tokens for
        with_safety_margin: Apply 30% safety margin (default True)
    """
    if not text:
        return 0
    base_estimate = len(text) // CHARS_PER_TOKEN
    if with_safety_margin:
        return int(base_estimate * (1 + SAFETY_MARGIN))
    return base_estimate


def exceeds_token_limit(text: str, limit: int) -> bool:
    """True if text is over `limit` tokens.

    The cheap estimate settles clear cases; tiktoken is consulted only when
    the estimate lands above the limit.
    """
    if estimate_tokens_fast(text) <= limit:
        return False
    exact = count_tokens_accurate(text)
    logger.debug(f"Prompt estimate over {limit:,} tokens, exact count {exact:,}")
    return exact > limit


def get_safe_limit_for_model(model_id: str) -> int:
    """Safe input token limit for a model identifier."""
    model_lower = model_id.lower()
    if "sonnet" in model_lower:
        return SONNET_SAFE_LIMIT
    elif "opus" in model_lower:
        return OPUS_SAFE_LIMIT
    return HAIKU_SAFE_LIMIT
