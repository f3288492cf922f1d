"""
Document summarization workflow graph.

Small documents are summarized with a single prompt. Anything larger, or
anything the backend rejects as too large, goes through the chunked
map-reduce graph:

    chunk_document -> generate_overview  \\
                   -> summarize_sections  -> reduce_summaries

The generation client and pipeline config are passed to the nodes through
the graph's `configurable` config, so nothing is shared between requests
except the client itself.
"""

import logging
from typing import Any, Optional

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langsmith import traceable

from core.config import SummarizationConfig, get_summarization_config
from core.errors import GenerationError, RequestTooLargeError, SummarizationFailed
from workflows.shared.llm_utils import GenerationClient, resolve_model
from workflows.shared.retry_utils import with_retry
from workflows.shared.text_utils import count_words
from workflows.shared.tracing import (
    add_trace_metadata,
    merge_trace_config,
    workflow_traceable,
)

from .chunking import build_chunks
from .prompts import OVERVIEW_PLACEHOLDER
from .reducer import SummaryReducer
from .scheduler import BatchScheduler
from .sections import SectionSummarizer
from .state import (
    SummarizationResult,
    SummarizationState,
    section_count_invariant_holds,
)

logger = logging.getLogger(__name__)

# Documents above this size get a warning; they still go through
LARGE_DOCUMENT_CHARS = 100_000


def _runtime(config: Optional[RunnableConfig]) -> tuple[GenerationClient, SummarizationConfig]:
    """Client and settings injected through config["configurable"]."""
    configurable = (config or {}).get("configurable", {})
    settings = configurable.get("summarization_config") or get_summarization_config()
    client = configurable.get("generation_client") or GenerationClient(
        temperature=settings.temperature
    )
    return client, settings


@traceable(run_type="chain", name="ChunkDocument")
async def chunk_document(state: SummarizationState, config: RunnableConfig) -> dict[str, Any]:
    """Split the document into ordered chunks."""
    _, settings = _runtime(config)
    max_chunk_size = state.get("max_chunk_size") or settings.max_chunk_size
    chunks = build_chunks(state["document_text"], max_chunk_size)

    if not chunks:
        raise SummarizationFailed("No text content provided for summarization")

    logger.info(f"Document split into {len(chunks)} chunks (max {max_chunk_size:,} chars)")
    return {
        "chunks": chunks,
        "current_status": "chunked",
    }


@traceable(run_type="chain", name="GenerateOverview")
async def generate_overview(state: SummarizationState, config: RunnableConfig) -> dict[str, Any]:
    """Short synopsis from the start of the document. Never fails the graph."""
    client, settings = _runtime(config)
    summarizer = SectionSummarizer(client, settings)
    overview = await summarizer.generate_overview(state["document_text"], model=state.get("model"))
    # No current_status here - runs in parallel with summarize_sections
    if overview == OVERVIEW_PLACEHOLDER:
        return {
            "overview": overview,
            "errors": [{"phase": "generate_overview", "error": "overview unavailable"}],
        }
    return {"overview": overview}


@traceable(run_type="chain", name="SummarizeSections")
async def summarize_sections(state: SummarizationState, config: RunnableConfig) -> dict[str, Any]:
    """Summarize every chunk through the batch scheduler."""
    client, settings = _runtime(config)
    chunks = state["chunks"]
    scheduler = BatchScheduler(SectionSummarizer(client, settings), settings)

    sections, all_included = await scheduler.process_all(chunks, model=state.get("model"))

    if not section_count_invariant_holds(chunks, sections):
        raise RuntimeError(
            f"Section count mismatch: {len(sections)} sections for {len(chunks)} chunks"
        )
    if all(section.is_fallback for section in sections):
        raise SummarizationFailed(
            f"None of the {len(chunks)} sections could be summarized"
        )

    return {
        "section_summaries": sections,
        "all_sections_included": all_included,
        "errors": [
            {"phase": "summarize_sections", "section": s.index + 1, "error": "fallback extract used"}
            for s in sections
            if s.is_fallback
        ],
    }


@traceable(run_type="chain", name="ReduceSummaries")
async def reduce_summaries(state: SummarizationState, config: RunnableConfig) -> dict[str, Any]:
    """Combine overview and sections into the final summary."""
    client, settings = _runtime(config)
    reducer = SummaryReducer(client, settings)
    summary_text = await reducer.reduce(
        state["overview"],
        state["section_summaries"],
        model=state.get("model"),
    )
    logger.info(f"Final summary: {count_words(summary_text)} words")
    return {
        "summary_text": summary_text,
        "current_status": "summary_complete",
    }


def create_summarization_graph():
    """
    Create the chunked summarization graph.

    1. START -> chunk_document
    2. chunk_document -> generate_overview, summarize_sections (parallel)
    3. both -> reduce_summaries -> END
    """
    builder = StateGraph(SummarizationState)

    builder.add_node("chunk_document", chunk_document)
    builder.add_node("generate_overview", generate_overview)
    builder.add_node("summarize_sections", summarize_sections)
    builder.add_node("reduce_summaries", reduce_summaries)

    builder.add_edge(START, "chunk_document")
    builder.add_edge("chunk_document", "generate_overview")
    builder.add_edge("chunk_document", "summarize_sections")
    builder.add_edge(["generate_overview", "summarize_sections"], "reduce_summaries")
    builder.add_edge("reduce_summaries", END)

    return builder.compile()


summarization_graph = create_summarization_graph()


async def _summarize_direct(
    text: str,
    model: str,
    client: GenerationClient,
    settings: SummarizationConfig,
) -> SummarizationResult:
    """One prompt for the whole document, with the usual retry policy.

    Raises:
        RequestTooLargeError: caller should fall back to chunking
        AuthInvalidError: credentials rejected
        SummarizationFailed: retries exhausted
    """
    summarizer = SectionSummarizer(client, settings)
    try:
        summary_text = await with_retry(
            lambda: summarizer.summarize_document(text, model=model),
            max_attempts=1 + settings.max_retries,
            backoff_base=settings.retry_backoff_base,
            retry_on=GenerationError,
            should_retry=lambda e: getattr(e, "retryable", False),
        )
    except GenerationError as e:
        if not e.retryable:
            raise
        raise SummarizationFailed(e.user_message, cause=e) from e

    return SummarizationResult(
        summary_text=summary_text,
        model_name=model,
        chunks_processed=1,
        total_chunks=1,
        all_sections_included=True,
    )


async def _summarize_chunked(
    text: str,
    model: str,
    max_chunk_size: int,
    client: GenerationClient,
    settings: SummarizationConfig,
) -> SummarizationResult:
    initial_state: SummarizationState = {
        "document_text": text,
        "model": model,
        "max_chunk_size": max_chunk_size,
        "current_status": "starting",
        "errors": [],
    }
    run_config = merge_trace_config(
        {
            "configurable": {
                "generation_client": client,
                "summarization_config": settings,
            }
        }
    )

    final_state = await summarization_graph.ainvoke(initial_state, config=run_config)

    for error in final_state.get("errors", []):
        logger.warning(f"Degraded output in {error['phase']}: {error}")

    sections = final_state["section_summaries"]
    return SummarizationResult(
        summary_text=final_state["summary_text"],
        model_name=model,
        chunks_processed=sum(1 for s in sections if not s.is_fallback),
        total_chunks=len(final_state["chunks"]),
        all_sections_included=final_state["all_sections_included"],
    )


@workflow_traceable(name="SummarizeDocument", workflow_type="summarization")
async def summarize(
    document_text: str,
    model: Optional[str] = None,
    *,
    client: Optional[GenerationClient] = None,
    config: Optional[SummarizationConfig] = None,
) -> SummarizationResult:
    """
    Summarize extracted document text of any size.

    Args:
        document_text: Raw extracted text
        model: Tier name or model identifier (default: DOCSUM_DEFAULT_MODEL / Sonnet)
        client: Generation client (default: ChatAnthropic-backed client)
        config: Pipeline settings (default: from environment)

    Returns:
        SummarizationResult with the summary and coverage metadata

    Raises:
        SummarizationFailed: empty input, or no section could be summarized
        AuthInvalidError: backend rejected the credentials
    """
    settings = config or get_summarization_config()
    client = client or GenerationClient(temperature=settings.temperature)
    model_id = resolve_model(model)

    if not document_text or not document_text.strip():
        raise SummarizationFailed("No text content provided for summarization")

    if len(document_text) > LARGE_DOCUMENT_CHARS:
        logger.warning(
            f"Large text content detected: {len(document_text):,} characters. "
            "Summarization may take longer."
        )

    add_trace_metadata({"document_chars": len(document_text), "model": model_id})
    logger.info(f"Starting summarization with {model_id} for {len(document_text):,} characters")

    max_chunk_size = settings.max_chunk_size
    if len(document_text) <= max_chunk_size:
        try:
            result = await _summarize_direct(document_text, model_id, client, settings)
            logger.info(f"Summarization completed. Summary length: {len(result.summary_text)} characters")
            return result
        except RequestTooLargeError as e:
            max_chunk_size = max(1, len(document_text) // 2)
            logger.warning(
                f"Document rejected as too large for a single prompt ({e}), "
                f"retrying with {max_chunk_size:,}-char chunks"
            )

    result = await _summarize_chunked(document_text, model_id, max_chunk_size, client, settings)
    logger.info(
        f"Summarization completed: {result.chunks_processed}/{result.total_chunks} sections, "
        f"{len(result.summary_text)} characters"
    )
    return result
