"""
Tests for overview, section and direct-document summarization calls.
"""

import asyncio

import pytest

from core.errors import AuthInvalidError
from workflows.document_summarization.prompts import OVERVIEW_PLACEHOLDER
from workflows.document_summarization.sections import (
    DOCUMENT_MAX_TOKENS,
    OVERVIEW_MAX_TOKENS,
    SECTION_MAX_TOKENS,
    SectionSummarizer,
    build_fallback_summary,
)
from testing.utils import fast_config, make_client


def _summarizer(responder=None):
    client, llm = make_client(responder) if responder else make_client()
    return SectionSummarizer(client, fast_config()), llm


class TestGenerateOverview:
    """Tests for SectionSummarizer.generate_overview."""

    def test_uses_only_the_opening(self):
        summarizer, llm = _summarizer()
        text = "a" * 6000 + "TAIL-MARKER"

        overview = asyncio.run(summarizer.generate_overview(text))

        assert overview == "A document about testing summarization pipelines."
        call = llm.calls_of("overview")[0]
        assert "TAIL-MARKER" not in call.prompt
        assert "a" * 5000 in call.prompt
        assert call.max_tokens == OVERVIEW_MAX_TOKENS == 300

    def test_short_text_is_used_whole(self):
        summarizer, llm = _summarizer()
        asyncio.run(summarizer.generate_overview("A very short document."))
        assert "A very short document." in llm.calls[0].prompt

    def test_failure_yields_placeholder(self):
        summarizer, _ = _summarizer(lambda prompt, max_tokens: RuntimeError("overloaded"))
        assert asyncio.run(summarizer.generate_overview("text")) == OVERVIEW_PLACEHOLDER

    def test_auth_failure_propagates(self):
        summarizer, _ = _summarizer(lambda prompt, max_tokens: RuntimeError("authentication failed"))
        with pytest.raises(AuthInvalidError):
            asyncio.run(summarizer.generate_overview("text"))


class TestSummarizeChunk:
    """Tests for SectionSummarizer.summarize_chunk."""

    def test_prompt_names_section_position(self):
        summarizer, llm = _summarizer()
        summary = asyncio.run(summarizer.summarize_chunk("chunk body", 2, 7))

        assert summary == "Summary of section 3."
        call = llm.calls[0]
        assert "section 3 of 7" in call.prompt
        assert "chunk body" in call.prompt
        assert call.max_tokens == SECTION_MAX_TOKENS == 1024

    def test_errors_propagate_classified(self):
        summarizer, _ = _summarizer(lambda prompt, max_tokens: RuntimeError("request timed out"))
        with pytest.raises(Exception) as exc_info:
            asyncio.run(summarizer.summarize_chunk("body", 0, 1))
        assert exc_info.value.__class__.__name__ == "GenerationTimeoutError"


class TestSummarizeDocument:
    def test_single_prompt_summary(self):
        summarizer, llm = _summarizer()
        summary = asyncio.run(summarizer.summarize_document("whole document"))

        assert summary == "Direct summary of the whole document."
        assert llm.calls[0].kind == "document"
        assert llm.calls[0].max_tokens == DOCUMENT_MAX_TOKENS == 2048


class TestFallbackSummary:
    """Tests for build_fallback_summary."""

    def test_marks_section_and_previews_text(self):
        text = "x" * 800
        fallback = build_fallback_summary(text, 2)

        assert fallback.startswith("[Section 3 summary unavailable due to processing limits]")
        assert "Preview of original text:" in fallback
        assert "x" * 500 + "..." in fallback
        assert "x" * 501 not in fallback

    def test_custom_preview_length(self):
        fallback = build_fallback_summary("abcdefghij", 0, preview_chars=4)
        assert fallback.endswith("abcd...")
