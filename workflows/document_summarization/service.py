"""
Summary records: extract document text, summarize it, persist the result.

Storage and extraction sit behind small protocols so the workflow can run
against real backends or the in-memory implementations below (used by the
CLI and tests).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from core.config import SummarizationConfig
from core.errors import RecordNotFoundError, SummarizationFailed
from workflows.shared.llm_utils import GenerationClient

from .graph import summarize

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SummaryRecord(BaseModel):
    """Stored document plus its summary and coverage metadata."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    original_name: str
    mime_type: str = "text/plain"
    size_bytes: int = 0
    document_id: str

    summary_text: Optional[str] = None
    model_name: Optional[str] = None
    chunks_processed: Optional[int] = None
    total_chunks: Optional[int] = None
    all_sections_included: Optional[bool] = None

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class DocumentStore(Protocol):
    async def put(self, data: bytes, filename: str, mime_type: str) -> str: ...

    async def get(self, document_id: str) -> bytes: ...


class TextExtractor(Protocol):
    async def extract(self, document_id: str) -> str: ...


class RecordStore(Protocol):
    async def get(self, summary_id: str) -> Optional[SummaryRecord]: ...

    async def save(self, record: SummaryRecord) -> None: ...

    async def list_by_user(self, user_id: str) -> list[SummaryRecord]: ...


class InMemoryDocumentStore:
    """Keeps uploaded bytes in a dict keyed by generated id."""

    def __init__(self):
        self._documents: dict[str, bytes] = {}

    async def put(self, data: bytes, filename: str, mime_type: str) -> str:
        document_id = f"{uuid.uuid4()}-{filename}"
        self._documents[document_id] = data
        logger.debug(f"Stored {len(data):,} bytes as {document_id} ({mime_type})")
        return document_id

    async def get(self, document_id: str) -> bytes:
        try:
            return self._documents[document_id]
        except KeyError:
            raise KeyError(f"Document not found: {document_id}") from None


class PlainTextExtractor:
    """Decodes stored bytes as UTF-8 text."""

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    async def extract(self, document_id: str) -> str:
        data = await self.documents.get(document_id)
        return data.decode("utf-8", errors="replace")


class InMemoryRecordStore:
    def __init__(self):
        self._records: dict[str, SummaryRecord] = {}

    async def get(self, summary_id: str) -> Optional[SummaryRecord]:
        record = self._records.get(summary_id)
        return record.model_copy() if record else None

    async def save(self, record: SummaryRecord) -> None:
        self._records[record.id] = record.model_copy()

    async def list_by_user(self, user_id: str) -> list[SummaryRecord]:
        """Records owned by user_id, newest first."""
        owned = [r.model_copy() for r in self._records.values() if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)


async def generate_and_store_summary(
    summary_id: str,
    model: Optional[str] = None,
    *,
    records: RecordStore,
    extractor: TextExtractor,
    client: Optional[GenerationClient] = None,
    config: Optional[SummarizationConfig] = None,
) -> SummaryRecord:
    """
    Summarize the document behind a record and persist the result.

    A record that already has a summary is returned unchanged.

    Raises:
        RecordNotFoundError: no record with this id
        SummarizationFailed: pipeline produced no usable summary
        AuthInvalidError: backend rejected the credentials
    """
    record = await records.get(summary_id)
    if record is None:
        raise RecordNotFoundError(summary_id)

    if record.summary_text:
        logger.info(f"Summary {summary_id} already generated, skipping")
        return record

    text = await extractor.extract(record.document_id)
    logger.info(
        f"Generating summary {summary_id} for {record.original_name} "
        f"({len(text):,} chars extracted)"
    )

    try:
        result = await summarize(text, model, client=client, config=config)
    except SummarizationFailed as e:
        logger.error(f"Summary {summary_id} failed: {e}")
        raise

    updated = record.model_copy(
        update={
            "summary_text": result.summary_text,
            "model_name": result.model_name,
            "chunks_processed": result.chunks_processed,
            "total_chunks": result.total_chunks,
            "all_sections_included": result.all_sections_included,
            "updated_at": _utc_now(),
        }
    )
    await records.save(updated)

    if not result.all_sections_included:
        logger.warning(
            f"Summary {summary_id} covers {result.chunks_processed}/{result.total_chunks} "
            "sections with model summaries; the rest are extracts"
        )
    return updated


async def upload_and_summarize(
    data: bytes,
    filename: str,
    mime_type: str,
    user_id: str,
    model: Optional[str] = None,
    *,
    documents: DocumentStore,
    records: RecordStore,
    extractor: TextExtractor,
    client: Optional[GenerationClient] = None,
    config: Optional[SummarizationConfig] = None,
) -> SummaryRecord:
    """Store an uploaded document, create its record and summarize it."""
    document_id = await documents.put(data, filename, mime_type)
    record = SummaryRecord(
        user_id=user_id,
        original_name=filename,
        mime_type=mime_type,
        size_bytes=len(data),
        document_id=document_id,
    )
    await records.save(record)
    logger.info(f"Created summary record {record.id} for {filename} ({len(data):,} bytes)")

    return await generate_and_store_summary(
        record.id,
        model,
        records=records,
        extractor=extractor,
        client=client,
        config=config,
    )


async def list_summaries_by_user(user_id: str, *, records: RecordStore) -> list[SummaryRecord]:
    """All summary records for a user, newest first."""
    summaries = await records.list_by_user(user_id)
    logger.debug(f"Found {len(summaries)} summaries for user {user_id}")
    return summaries
