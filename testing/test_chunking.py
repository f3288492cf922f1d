"""
Tests for structure-aware document chunking and the text helpers it uses.
"""

import pytest

from workflows.document_summarization.chunking import (
    build_chunks,
    chunk_text,
    find_structural_boundaries,
    is_heading_line,
)
from workflows.shared.text_utils import (
    get_preview,
    split_paragraphs,
    split_sentences,
    split_words,
)
from testing.utils import (
    make_chapter,
    make_chaptered_document,
    make_paragraph,
    make_plain_document,
)


def _same_words(chunks: list[str], text: str) -> bool:
    return " ".join(chunks).split() == text.split()


class TestHeadingDetection:
    """Tests for is_heading_line."""

    def test_keyword_headings(self):
        assert is_heading_line("Chapter 1")
        assert is_heading_line("CHAPTER IV")
        assert is_heading_line("Part II")
        assert is_heading_line("Section 3")
        assert is_heading_line("Book One")

    def test_numbered_and_roman_headings(self):
        assert is_heading_line("1. Introduction")
        assert is_heading_line("2.3 Methods")
        assert is_heading_line("IV. Results")

    def test_markdown_headings(self):
        assert is_heading_line("# Title")
        assert is_heading_line("### Deep heading")

    def test_prose_is_not_a_heading(self):
        assert not is_heading_line("")
        assert not is_heading_line("   ")
        assert not is_heading_line("The chapter begins here.")
        assert not is_heading_line("Chapters of a life")
        assert not is_heading_line("Partial results were obtained")
        assert not is_heading_line("Chapter")

    def test_list_items_are_not_headings(self):
        # Numbered line ending in punctuation reads as a list item
        assert not is_heading_line("1. Mix the flour and sugar.")

    def test_long_numbered_line_is_not_a_heading(self):
        assert not is_heading_line("1. A" + "b" * 150)

    def test_boundary_offsets(self):
        text = "Intro\nChapter 1\nBody\nChapter 2\nMore"
        assert find_structural_boundaries(text) == [6, 21]

    def test_numbered_list_run_is_not_structure(self):
        items = "\n".join(f"{n} Item number {n}" for n in range(1, 120))
        assert find_structural_boundaries(f"Intro\n\n{items}\n\nOutro") == []

    def test_isolated_numbered_headings_still_count(self):
        text = f"1. Introduction\n\n{make_paragraph()}\n\n2. Methods\n\n{make_paragraph()}"
        assert len(find_structural_boundaries(text)) == 2

    def test_code_fence_comments_are_ignored(self):
        text = "# Guide\n\n```python\n# step 1\nvalue = 1\n```\n\n~~~\n# step 2\n~~~\n\n## Next"
        assert find_structural_boundaries(text) == [0, text.index("## Next")]



class TestChunkText:
    """Tests for chunk_text."""

    def test_text_that_fits_is_returned_unchanged(self):
        text = "  short text with spaces  \n"
        assert chunk_text(text, 100) == [text]

    def test_blank_text_yields_no_chunks(self):
        assert chunk_text("", 100) == []
        assert chunk_text("   \n\n  ", 100) == []

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            chunk_text("some text", 0)

    def test_structural_split_one_chunk_per_chapter(self):
        text = make_chaptered_document(3)
        chunks = chunk_text(text, 600)

        assert len(chunks) == 3
        for n, chunk in enumerate(chunks, 1):
            assert chunk.startswith(f"Chapter {n}")
        assert _same_words(chunks, text)

    def test_preamble_forms_its_own_chunk(self):
        preamble = make_paragraph(2)
        text = preamble + "\n\n" + make_chaptered_document(3)
        chunks = chunk_text(text, 600)

        assert chunks[0] == preamble
        assert chunks[1].startswith("Chapter 1")
        assert len(chunks) == 4

    def test_oversized_chapter_falls_back_to_paragraphs(self):
        text = make_chapter(1, paragraphs=6) + "\n\n" + make_chapter(2)
        chunks = chunk_text(text, 500)

        assert len(chunks) == 4
        assert chunks[0].startswith("Chapter 1")
        assert chunks[-1].startswith("Chapter 2")
        assert all(len(chunk) <= 500 for chunk in chunks)
        assert _same_words(chunks, text)

    def test_markdown_structure(self):
        paragraph = make_paragraph()
        text = f"# Intro\n\n{paragraph}\n\n## Methods\n\n{paragraph}\n\n## Results\n\n{paragraph}"
        chunks = chunk_text(text, 300)

        assert [chunk.split("\n", 1)[0] for chunk in chunks] == [
            "# Intro",
            "## Methods",
            "## Results",
        ]

    def test_paragraph_packing_without_headings(self):
        text = make_plain_document(10)
        chunks = chunk_text(text, 500)

        # Two 224-char paragraphs fit per chunk, three do not
        assert len(chunks) == 5
        assert all(len(chunk) <= 500 for chunk in chunks)
        assert all("\n\n" in chunk for chunk in chunks)
        assert _same_words(chunks, text)

    def test_single_heading_is_not_structure(self):
        text = "Chapter 1\n\n" + make_plain_document(10)
        chunks = chunk_text(text, 500)

        assert chunks[0].startswith("Chapter 1\n\n")
        assert len(chunks) == 5
        assert _same_words(chunks, text)

    def test_oversized_paragraph_split_by_sentences(self):
        text = make_paragraph(20)
        chunks = chunk_text(text, 200)

        assert len(chunks) == 5
        assert all(len(chunk) <= 200 for chunk in chunks)
        assert all(chunk.endswith(".") for chunk in chunks)
        assert _same_words(chunks, text)

    def test_unpunctuated_run_is_hard_split(self):
        text = " ".join(["alpha"] * 400)
        chunks = chunk_text(text, 100)

        assert len(chunks) > 1
        assert all(0 < len(chunk) <= 100 for chunk in chunks)
        assert _same_words(chunks, text)

    def test_chunks_are_non_empty_and_bounded(self):
        documents = [
            make_chaptered_document(7, paragraphs=3),
            make_plain_document(25, sentences=3),
            "Part I\n\n" + make_paragraph(30) + "\n\nPart II\n\n" + make_paragraph(3),
        ]
        for text in documents:
            for max_size in (150, 400, 1000):
                chunks = chunk_text(text, max_size)
                assert chunks
                assert all(chunk.strip() for chunk in chunks)
                assert all(len(chunk) <= max_size for chunk in chunks)
                assert _same_words(chunks, text)

    def test_short_chapters_are_packed(self):
        text = make_chaptered_document(6)
        chunks = chunk_text(text, 1000)

        # Two ~460-char chapters fit per chunk
        assert [chunk.split("\n", 1)[0] for chunk in chunks] == [
            "Chapter 1",
            "Chapter 3",
            "Chapter 5",
        ]
        assert all(len(chunk) <= 1000 for chunk in chunks)
        assert _same_words(chunks, text)

    def test_long_numbered_list_does_not_multiply_chunks(self):
        items = "\n".join(f"{n} Item number {n}" for n in range(1, 120))
        body = make_plain_document(12, sentences=10)
        text = f"{body}\n\n{items}\n\n{body}"
        assert len(text) > 12_000

        chunks = chunk_text(text, 8000)

        assert len(chunks) <= len(text) // 8000 + 2
        assert all(len(chunk) > 1000 for chunk in chunks)
        assert _same_words(chunks, text)

    def test_code_comments_do_not_multiply_chunks(self):
        steps = "\n\n".join(
            f"{make_paragraph(3)}\n\n```python\n# step {i}\nvalue = {i}\n```" for i in range(60)
        )
        text = f"# Guide\n\n{steps}\n\n# Appendix\n\n{make_paragraph()}"
        assert len(text) > 8000

        chunks = chunk_text(text, 8000)

        assert len(chunks) <= len(text) // 8000 + 2
        assert chunks[0].startswith("# Guide")
        assert _same_words(chunks, text)

    def test_build_chunks_indexes_in_order(self):

        chunks = build_chunks(make_chaptered_document(4), 600)
        assert [chunk.index for chunk in chunks] == [0, 1, 2, 3]
        assert chunks[2].text.startswith("Chapter 3")


class TestTextUtils:
    """Tests for the splitting helpers in workflows.shared.text_utils."""

    def test_split_paragraphs_drops_blank_blocks(self):
        assert split_paragraphs("a\n\n \n\nb\n  \nc") == ["a", "b", "c"]

    def test_split_sentences_keeps_punctuation(self):
        assert split_sentences("One. Two! Three? Four") == ["One.", "Two!", "Three?", "Four"]

    def test_split_words_on_spaces(self):
        assert split_words("one two three four", 9) == ["one two", "three", "four"]

    def test_split_words_cuts_long_tokens(self):
        assert split_words("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_split_words_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            split_words("text", 0)

    def test_get_preview(self):
        assert get_preview("  hello world  ", 7) == "hello"
        assert get_preview("abc", 0) == ""
