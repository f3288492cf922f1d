"""
Shared testing utilities for summarization tests.

- fake_llm: Scripted chat-model backend and client/config factories
- documents: Synthetic chaptered and plain documents
"""

from .documents import (
    SENTENCE,
    make_chapter,
    make_chaptered_document,
    make_paragraph,
    make_plain_document,
)
from .fake_llm import (
    GenerationCall,
    ScriptedLLM,
    default_responder,
    fast_config,
    make_client,
    prompt_kind,
    section_number,
)

__all__ = [
    # documents
    "SENTENCE",
    "make_chapter",
    "make_chaptered_document",
    "make_paragraph",
    "make_plain_document",
    # fake_llm
    "GenerationCall",
    "ScriptedLLM",
    "default_responder",
    "fast_config",
    "make_client",
    "prompt_kind",
    "section_number",
]
