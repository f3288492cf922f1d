"""Document summarization workflow.

Summarizes extracted document text of any size:
- Small documents: one summary prompt
- Large documents: chunk, summarize sections in bounded batches, combine

Section failures degrade to marked extracts instead of failing the request;
`all_sections_included` reports whether that happened.
"""

from workflows.document_summarization.chunking import build_chunks, chunk_text
from workflows.document_summarization.graph import (
    create_summarization_graph,
    summarize,
)
from workflows.document_summarization.reducer import (
    SummaryReducer,
    check_section_coverage,
)
from workflows.document_summarization.scheduler import BatchScheduler
from workflows.document_summarization.sections import SectionSummarizer
from workflows.document_summarization.service import (
    DocumentStore,
    InMemoryDocumentStore,
    InMemoryRecordStore,
    PlainTextExtractor,
    RecordStore,
    SummaryRecord,
    TextExtractor,
    generate_and_store_summary,
    list_summaries_by_user,
    upload_and_summarize,
)
from workflows.document_summarization.state import (
    Chunk,
    ChunkJob,
    ChunkStatus,
    SectionSummary,
    SummarizationResult,
    SummarizationState,
)

__all__ = [
    # State types
    "Chunk",
    "ChunkJob",
    "ChunkStatus",
    "SectionSummary",
    "SummarizationResult",
    "SummarizationState",
    # Pipeline
    "BatchScheduler",
    "SectionSummarizer",
    "SummaryReducer",
    "build_chunks",
    "check_section_coverage",
    "chunk_text",
    "create_summarization_graph",
    "summarize",
    # Records
    "DocumentStore",
    "InMemoryDocumentStore",
    "InMemoryRecordStore",
    "PlainTextExtractor",
    "RecordStore",
    "SummaryRecord",
    "TextExtractor",
    "generate_and_store_summary",
    "list_summaries_by_user",
    "upload_and_summarize",
]
