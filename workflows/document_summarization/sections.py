"""Overview and per-section summarization calls."""

import logging
from typing import Optional

from core.config import SummarizationConfig
from core.errors import AuthInvalidError, GenerationError
from workflows.shared.llm_utils import GenerationClient
from workflows.shared.text_utils import count_words, get_preview

from .prompts import (
    DOCUMENT_SUMMARY_PROMPT,
    FALLBACK_SECTION_TEMPLATE,
    OVERVIEW_PLACEHOLDER,
    OVERVIEW_PROMPT,
    SECTION_SUMMARY_PROMPT,
)

logger = logging.getLogger(__name__)

OVERVIEW_MAX_TOKENS = 300
SECTION_MAX_TOKENS = 1024
DOCUMENT_MAX_TOKENS = 2048


class SectionSummarizer:
    """Builds prompts for the overview, each section and the direct path.

    Args:
        client: Shared generation client
        config: Pipeline configuration (preview size)
    """

    def __init__(self, client: GenerationClient, config: Optional[SummarizationConfig] = None):
        self.client = client
        self.config = config or SummarizationConfig()

    async def generate_overview(self, full_text: str, model: Optional[str] = None) -> str:
        """2-3 sentence synopsis from the opening of the document.

        Failures are not fatal: the placeholder is returned instead. Invalid
        credentials still propagate.
        """
        preview = full_text[: min(self.config.overview_preview_chars, len(full_text))]
        prompt = OVERVIEW_PROMPT.format(preview=preview)
        try:
            overview = await self.client.generate(prompt, OVERVIEW_MAX_TOKENS, model=model)
        except AuthInvalidError:
            raise
        except GenerationError as e:
            logger.warning(f"Overview generation failed, using placeholder: {e}")
            return OVERVIEW_PLACEHOLDER

        logger.info(f"Generated overview ({count_words(overview)} words)")
        return overview

    async def summarize_chunk(
        self,
        chunk_text: str,
        chunk_index: int,
        total_chunks: int,
        model: Optional[str] = None,
    ) -> str:
        """Summarize one chunk as section `chunk_index + 1` of `total_chunks`.

        Raises:
            GenerationError subclass on failure.
        """
        prompt = SECTION_SUMMARY_PROMPT.format(
            section_number=chunk_index + 1,
            total_sections=total_chunks,
            text=chunk_text,
        )
        return await self.client.generate(prompt, SECTION_MAX_TOKENS, model=model)

    async def summarize_document(self, text: str, model: Optional[str] = None) -> str:
        """Single-prompt summary for documents that fit in one chunk."""
        prompt = DOCUMENT_SUMMARY_PROMPT.format(text=text)
        return await self.client.generate(prompt, DOCUMENT_MAX_TOKENS, model=model)


def build_fallback_summary(chunk_text: str, chunk_index: int, preview_chars: int = 500) -> str:
    """Deterministic placeholder for a section the model could not summarize."""
    return FALLBACK_SECTION_TEMPLATE.format(
        section_number=chunk_index + 1,
        preview=get_preview(chunk_text, preview_chars),
    )
