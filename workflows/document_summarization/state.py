"""
State schema and data types for the document summarization workflow.
"""

from dataclasses import dataclass
from enum import Enum
from operator import add
from typing import Annotated, Optional
from typing_extensions import TypedDict

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Chunk:
    """One bounded piece of the source document, in document order."""
    index: int
    text: str


class ChunkStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ChunkJob:
    """Per-chunk summarization job, mutated in place as attempts happen.

    Only the task working on a job writes to it; the scheduler reads it after
    the batch barrier.
    """
    chunk: Chunk
    attempts: int = 0
    status: ChunkStatus = ChunkStatus.PENDING
    summary: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def index(self) -> int:
        return self.chunk.index

    def record_attempt(self) -> None:
        self.attempts += 1

    def succeed(self, summary: str) -> None:
        self.status = ChunkStatus.SUCCEEDED
        self.summary = summary
        self.error = None

    def fail(self, error: Exception) -> None:
        self.status = ChunkStatus.FAILED
        self.error = error


@dataclass(frozen=True)
class SectionSummary:
    """Summary of one chunk. `is_fallback` marks a synthesized extract."""
    index: int
    text: str
    is_fallback: bool = False


class SummarizationResult(BaseModel):
    """Final output of one summarization request."""
    summary_text: str = Field(description="Final document summary")
    model_name: str = Field(description="Model identifier used for generation")
    chunks_processed: int = Field(description="Sections summarized by the model (not fallback extracts)")
    total_chunks: int = Field(description="Number of chunks the document was split into")
    all_sections_included: bool = Field(description="True only if no section used a fallback extract")


class SummarizationState(TypedDict, total=False):
    """LangGraph state for the chunked summarization path."""
    # Input
    document_text: str
    model: str
    max_chunk_size: int

    # Chunking
    chunks: list[Chunk]

    # Parallel branches
    overview: str
    section_summaries: list[SectionSummary]
    all_sections_included: bool

    # Reduction
    summary_text: str

    current_status: str
    errors: Annotated[list[dict], add]


def section_count_invariant_holds(chunks: list[Chunk], sections: list[SectionSummary]) -> bool:
    """One section per chunk, in chunk order."""
    return len(chunks) == len(sections) and all(
        c.index == s.index for c, s in zip(chunks, sections)
    )


__all__ = [
    "Chunk",
    "ChunkJob",
    "ChunkStatus",
    "SectionSummary",
    "SummarizationResult",
    "SummarizationState",
    "section_count_invariant_holds",
]
