"""Reduce the overview and section summaries to one document summary.

The combined summary must mention enough of the sections by number
("Section 3"); otherwise it is treated as lossy and replaced by a plain
concatenation that keeps every section.
"""

import logging
import re
from typing import Optional

from core.config import SummarizationConfig
from core.errors import AuthInvalidError, GenerationError
from workflows.shared.llm_utils import GenerationClient

from .prompts import (
    COMBINE_PROMPT,
    OVERVIEW_HEADING,
    PARTIAL_COVERAGE_NOTE,
    SECTION_HEADING_TEMPLATE,
    SINGLE_SECTION_HEADING,
)
from .state import SectionSummary

logger = logging.getLogger(__name__)

_SECTION_REFERENCE = re.compile(r"\bsection\s+(\d+)\b", re.IGNORECASE)


def count_section_references(text: str, expected_sections: int) -> int:
    """Number of distinct sections 1..expected_sections mentioned as "Section <n>"."""
    numbers = {int(match) for match in _SECTION_REFERENCE.findall(text)}
    return len({n for n in numbers if 1 <= n <= expected_sections})


def check_section_coverage(
    text: str,
    expected_sections: int,
    threshold: float = 0.7,
) -> bool:
    """True if the text references at least `threshold` of the expected sections."""
    if expected_sections <= 0:
        return True
    referenced = count_section_references(text, expected_sections)
    return referenced >= threshold * expected_sections


def concatenate_sections(overview: str, sections: list[SectionSummary]) -> str:
    """Overview plus one "## Section N" block per section, in order."""
    parts = [f"{OVERVIEW_HEADING}\n\n{overview}"]
    for section in sections:
        heading = SECTION_HEADING_TEMPLATE.format(section_number=section.index + 1)
        parts.append(f"{heading}\n\n{section.text}")
    return "\n\n".join(parts)


def append_coverage_note(summary: str, sections: list[SectionSummary]) -> str:
    """Append the disclosure note if any section is a fallback extract."""
    if any(section.is_fallback for section in sections):
        return f"{summary}\n\n---\n{PARTIAL_COVERAGE_NOTE}"
    return summary


class SummaryReducer:
    """Combines the overview and ordered section summaries.

    Args:
        client: Shared generation client
        config: Word/token budgets and the coverage threshold
    """

    def __init__(self, client: GenerationClient, config: Optional[SummarizationConfig] = None):
        self.client = client
        self.config = config or SummarizationConfig()

    def _build_prompt(self, overview: str, sections: list[SectionSummary]) -> str:
        section_text = "\n\n".join(
            f"Section {section.index + 1}:\n{section.text}" for section in sections
        )
        return COMBINE_PROMPT.format(
            section_count=len(sections),
            word_budget=self.config.combine_word_budget,
            overview=overview,
            sections=section_text,
        )

    async def _combine(
        self, overview: str, sections: list[SectionSummary], model: Optional[str]
    ) -> Optional[str]:
        """Single combination call; None if it failed or looks lossy."""
        prompt = self._build_prompt(overview, sections)
        try:
            combined = await self.client.generate(
                prompt, self.config.combine_max_tokens, model=model
            )
        except AuthInvalidError:
            raise
        except GenerationError as e:
            logger.warning(f"Combination call failed, concatenating sections: {e}")
            return None

        expected = len(sections)
        referenced = count_section_references(combined, expected)
        if not check_section_coverage(combined, expected, self.config.coverage_threshold):
            logger.warning(
                f"Combined summary references {referenced}/{expected} sections "
                f"(threshold {self.config.coverage_threshold:.0%}), concatenating sections"
            )
            return None

        logger.info(f"Combined {expected} sections, {referenced} referenced")
        return combined

    async def reduce(
        self,
        overview: str,
        sections: list[SectionSummary],
        model: Optional[str] = None,
    ) -> str:
        """
        Produce the final summary text.

        One section: overview + section under a fixed heading, no backend
        call. Several: one combination prompt, checked for coverage, with
        deterministic concatenation as the fallback.
        """
        if not sections:
            raise ValueError("reduce() needs at least one section summary")

        ordered = sorted(sections, key=lambda s: s.index)

        if len(ordered) == 1:
            summary = f"{OVERVIEW_HEADING}\n\n{overview}\n\n{SINGLE_SECTION_HEADING}\n\n{ordered[0].text}"
        else:
            summary = await self._combine(overview, ordered, model)
            if summary is None:
                summary = concatenate_sections(overview, ordered)

        return append_coverage_note(summary, ordered)
