"""Text processing utilities for document workflows."""

import re

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# Sentence end: terminal punctuation followed by whitespace
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def count_words(text: str) -> int:
    """Count words in text (split on whitespace)."""
    return len(text.split())


def get_preview(text: str, max_chars: int) -> str:
    """First `max_chars` characters of text, stripped."""
    if max_chars <= 0:
        return ""
    return text[:max_chars].strip()


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, dropping empty or whitespace-only blocks."""
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def split_sentences(text: str) -> list[str]:
    """Split after `.`, `!` or `?` followed by whitespace.

    Punctuation stays with its sentence. Empty pieces are dropped.
    """
    return [s.strip() for s in _SENTENCE_BREAK.split(text) if s.strip()]


def split_words(text: str, max_chars: int) -> list[str]:
    """Hard-split text into pieces of at most `max_chars`, on whitespace when possible.

    Used for runs of text with no sentence punctuation (tables, code, OCR
    noise). A single token longer than max_chars is cut mid-token.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")

    pieces = []
    remaining = text.strip()
    while len(remaining) > max_chars:
        cut = remaining.rfind(" ", 0, max_chars + 1)
        if cut <= 0:
            cut = max_chars
        piece = remaining[:cut].strip()
        if piece:
            pieces.append(piece)
        remaining = remaining[cut:].strip()
    if remaining:
        pieces.append(remaining)
    return pieces
