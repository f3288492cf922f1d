"""Prompts for document summarization."""

# Direct single-prompt summary for documents that fit in one chunk
DOCUMENT_SUMMARY_PROMPT = """Summarize the content of the document in a way that retains all important concepts, formulas, and methods. Make it concise but accurate. Use bullet points when appropriate.

Document:
{text}"""

OVERVIEW_PROMPT = """You are given the opening of a longer document. Write a 2-3 sentence overview describing what the document is about, its scope, and its purpose. Output only the overview.

Document opening:
{preview}"""

SECTION_SUMMARY_PROMPT = """You are summarizing section {section_number} of {total_sections} of a larger document.

Summarize this section so that nothing important is lost. Preserve:
- Key concepts and definitions
- Formulas, equations, and quantitative results
- Methods and procedures
- Data, figures, and specific facts
- Conclusions and implications

Be concise but accurate. Do not refer to other sections.

Section {section_number}:
{text}"""

COMBINE_PROMPT = """Combine the overview and section summaries below into a single, cohesive summary of the whole document.

Requirements:
- Cover every section; refer to each one explicitly as "Section N" (Section 1 through Section {section_count}).
- Preserve key concepts, formulas, methods, data, and conclusions.
- Avoid repetition.
- Keep it under {word_budget} words.

Overview:
{overview}

{sections}"""

# Overview substitute when the overview call fails
OVERVIEW_PLACEHOLDER = "Overview unavailable for this document."

FALLBACK_SECTION_TEMPLATE = """[Section {section_number} summary unavailable due to processing limits]
Preview of original text:
{preview}..."""

SINGLE_SECTION_HEADING = "## Document Summary"
OVERVIEW_HEADING = "## Overview"
SECTION_HEADING_TEMPLATE = "## Section {section_number}"

PARTIAL_COVERAGE_NOTE = (
    "Note: Some sections of this document could not be fully processed and "
    "use simplified summaries based on the original text."
)
