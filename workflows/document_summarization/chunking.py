"""Structure-aware chunking for large documents.

Splits on chapter/part/section headings first and packs short sections
together. Oversized sections fall through to paragraph, then sentence, packing
into chunks no larger than `max_chunk_size` characters.
"""

import logging
import re
from typing import Callable

from workflows.shared.text_utils import split_paragraphs, split_sentences, split_words

from .state import Chunk

logger = logging.getLogger(__name__)

# Default maximum chunk size in characters (~2k tokens)
DEFAULT_MAX_CHUNK_SIZE = 8000
# Minimum number of headings before the document counts as structured
MIN_STRUCTURAL_BOUNDARIES = 2
# Numbered / Roman-numeral headings longer than this are treated as prose
MAX_HEADING_LINE_CHARS = 100

_NUMBER_WORDS = (
    "one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|"
    "thirteen|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen|twenty"
)

_MARKDOWN_HEADING = re.compile(r"^#{1,6}\s+\S")
_KEYWORD_HEADING = re.compile(
    rf"^(chapter|part|section|book)\s+(\d+|[ivxlcdm]+|{_NUMBER_WORDS})\b",
    re.IGNORECASE,
)
_NUMBERED_HEADING = re.compile(r"^\d{1,3}(\.\d{1,3})*\.?\s+[A-Z]")
_ROMAN_HEADING = re.compile(r"^[IVXLCDM]{1,7}\.\s+[A-Z]")
_CODE_FENCE = re.compile(r"^(```|~~~)")


def _is_numbered(stripped: str) -> bool:
    return bool(_NUMBERED_HEADING.match(stripped) or _ROMAN_HEADING.match(stripped))


def is_heading_line(line: str) -> bool:
    """True if a single line looks like a chapter/part/section heading."""
    stripped = line.strip()
    if not stripped:
        return False
    if _MARKDOWN_HEADING.match(stripped):
        return True
    if len(stripped) > MAX_HEADING_LINE_CHARS:
        return False
    if _KEYWORD_HEADING.match(stripped):
        return True
    # Numbered forms collide with list items; require an unpunctuated line
    if stripped[-1] in ".,;:":
        return False
    return _is_numbered(stripped)


def find_structural_boundaries(text: str) -> list[int]:
    """Character offsets of every heading line, in document order.

    Lines inside ``` or ~~~ fences never count. A numbered line with another
    numbered line directly above or below it is a list item.
    """
    lines = text.splitlines(keepends=True)
    numbered = [_is_numbered(line.strip()) for line in lines]

    boundaries = []
    position = 0
    in_fence = False
    for i, line in enumerate(lines):
        if _CODE_FENCE.match(line.strip()):
            in_fence = not in_fence
        elif not in_fence and is_heading_line(line):
            in_list = numbered[i] and (
                (i > 0 and numbered[i - 1]) or (i + 1 < len(lines) and numbered[i + 1])
            )
            if not in_list:
                boundaries.append(position)
        position += len(line)
    return boundaries


def _pack(pieces: list[str], max_chunk_size: int, joiner: str) -> list[str]:
    """Greedily join pieces (each already within the limit) up to max_chunk_size."""
    chunks = []
    buffer = ""
    for piece in pieces:
        candidate = f"{buffer}{joiner}{piece}" if buffer else piece
        if len(candidate) <= max_chunk_size:
            buffer = candidate
        else:
            if buffer:
                chunks.append(buffer)
            buffer = piece
    if buffer:
        chunks.append(buffer)
    return chunks


def split_by_sentences(text: str, max_chunk_size: int) -> list[str]:
    """Pack sentences into chunks; hard-split any sentence over the limit."""
    pieces = []
    for sentence in split_sentences(text):
        if len(sentence) > max_chunk_size:
            pieces.extend(split_words(sentence, max_chunk_size))
        else:
            pieces.append(sentence)
    return _pack(pieces, max_chunk_size, " ")


def _pack_blocks(
    blocks: list[str],
    max_chunk_size: int,
    split_oversized: Callable[[str, int], list[str]],
) -> list[str]:
    """Pack blocks with blank lines between them.

    A block over the limit goes through `split_oversized` and never shares a
    chunk with its neighbours.
    """
    chunks: list[str] = []
    pending: list[str] = []
    for block in blocks:
        if len(block) > max_chunk_size:
            chunks.extend(_pack(pending, max_chunk_size, "\n\n"))
            pending = []
            chunks.extend(split_oversized(block, max_chunk_size))
        else:
            pending.append(block)
    chunks.extend(_pack(pending, max_chunk_size, "\n\n"))
    return chunks


def split_by_paragraphs(text: str, max_chunk_size: int) -> list[str]:
    """Pack blank-line-delimited paragraphs; oversized ones are split by sentences."""
    return _pack_blocks(split_paragraphs(text), max_chunk_size, split_by_sentences)


def split_by_structure(text: str, boundaries: list[int]) -> list[str]:
    """One segment per heading interval, plus any preamble before the first heading."""
    starts = boundaries if boundaries and boundaries[0] == 0 else [0, *boundaries]
    ends = [*starts[1:], len(text)]
    segments = [text[start:end].strip() for start, end in zip(starts, ends)]
    return [segment for segment in segments if segment]


def pack_segments(segments: list[str], max_chunk_size: int) -> list[str]:
    """Join consecutive heading segments up to max_chunk_size; oversized ones are split by paragraphs."""
    return _pack_blocks(segments, max_chunk_size, split_by_paragraphs)


def chunk_text(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[str]:
    """
    Split raw document text into ordered chunks of at most max_chunk_size chars.

    Text that already fits is returned unchanged as a single chunk. Otherwise
    the document is cut at structural headings when at least two are found,
    consecutive short sections are packed together, and any oversized piece falls through to paragraph and then sentence
    packing. Whitespace-only pieces are dropped; nothing else is.

    Args:
        text: Raw extracted document text
        max_chunk_size: Maximum characters per chunk

    Returns:
        Chunk texts in document order (empty only for blank input)
    """
    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be positive")
    if not text or not text.strip():
        return []
    if len(text) <= max_chunk_size:
        return [text]

    boundaries = find_structural_boundaries(text)

    if len(boundaries) >= MIN_STRUCTURAL_BOUNDARIES:
        segments = split_by_structure(text, boundaries)
        if boundaries[0] > 0 and text[: boundaries[0]].strip():
            # Preamble stays on its own so every later chunk opens on a heading
            chunks = pack_segments(segments[:1], max_chunk_size)
            chunks.extend(pack_segments(segments[1:], max_chunk_size))
        else:
            chunks = pack_segments(segments, max_chunk_size)
        strategy = f"structural ({len(boundaries)} headings)"
    else:
        chunks = split_by_paragraphs(text, max_chunk_size)
        strategy = "paragraph"

    logger.info(
        f"Split {len(text):,} chars into {len(chunks)} chunks using {strategy} splitting"
    )
    return chunks


def build_chunks(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[Chunk]:
    """chunk_text() wrapped in indexed Chunk records."""
    return [
        Chunk(index=i, text=piece)
        for i, piece in enumerate(chunk_text(text, max_chunk_size))
    ]
