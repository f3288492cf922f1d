"""
Tests for summary records: upload, generate-and-store, idempotence.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from core.errors import RecordNotFoundError, SummarizationFailed
from workflows.document_summarization.service import (
    InMemoryDocumentStore,
    InMemoryRecordStore,
    PlainTextExtractor,
    SummaryRecord,
    generate_and_store_summary,
    list_summaries_by_user,
    upload_and_summarize,
)
from testing.utils import fast_config, make_chaptered_document, make_client


class Stores:
    def __init__(self):
        self.documents = InMemoryDocumentStore()
        self.records = InMemoryRecordStore()
        self.extractor = PlainTextExtractor(self.documents)


class TestUploadAndSummarize:
    """Tests for upload_and_summarize."""

    def test_creates_and_fills_record(self):
        stores = Stores()
        client, llm = make_client()
        data = make_chaptered_document(5).encode("utf-8")

        record = asyncio.run(
            upload_and_summarize(
                data,
                "book.txt",
                "text/plain",
                "user-1",
                documents=stores.documents,
                records=stores.records,
                extractor=stores.extractor,
                client=client,
                config=fast_config(max_chunk_size=600),
            )
        )

        assert record.user_id == "user-1"
        assert record.original_name == "book.txt"
        assert record.size_bytes == len(data)
        assert record.summary_text
        assert record.total_chunks == 5
        assert record.chunks_processed == 5
        assert record.all_sections_included is True
        assert record.updated_at >= record.created_at

        stored = asyncio.run(stores.records.get(record.id))
        assert stored == record

    def test_failure_leaves_record_without_summary(self):
        stores = Stores()
        client, _ = make_client(lambda prompt, max_tokens: RuntimeError("overloaded"))

        with pytest.raises(SummarizationFailed):
            asyncio.run(
                upload_and_summarize(
                    b"A short document.",
                    "short.txt",
                    "text/plain",
                    "user-1",
                    documents=stores.documents,
                    records=stores.records,
                    extractor=stores.extractor,
                    client=client,
                    config=fast_config(),
                )
            )

        records = list(stores.records._records.values())
        assert len(records) == 1
        assert records[0].summary_text is None


class TestGenerateAndStoreSummary:
    """Tests for generate_and_store_summary."""

    def _record(self, stores: Stores, text: str, **fields) -> SummaryRecord:
        document_id = asyncio.run(stores.documents.put(text.encode(), "doc.txt", "text/plain"))
        record = SummaryRecord(
            user_id="user-1",
            original_name="doc.txt",
            size_bytes=len(text),
            document_id=document_id,
            **fields,
        )
        asyncio.run(stores.records.save(record))
        return record

    def test_existing_summary_returned_unchanged(self):
        stores = Stores()
        record = self._record(stores, "Some text.", summary_text="Already done.")
        client, llm = make_client()

        result = asyncio.run(
            generate_and_store_summary(
                record.id,
                records=stores.records,
                extractor=stores.extractor,
                client=client,
                config=fast_config(),
            )
        )

        assert result == record
        assert llm.calls == []

    def test_missing_record(self):
        stores = Stores()
        client, _ = make_client()
        with pytest.raises(RecordNotFoundError) as exc_info:
            asyncio.run(
                generate_and_store_summary(
                    "no-such-id",
                    records=stores.records,
                    extractor=stores.extractor,
                    client=client,
                )
            )
        assert exc_info.value.summary_id == "no-such-id"

    def test_direct_summary_stored(self):
        stores = Stores()
        record = self._record(stores, "A short document.")
        client, _ = make_client()

        result = asyncio.run(
            generate_and_store_summary(
                record.id,
                "haiku",
                records=stores.records,
                extractor=stores.extractor,
                client=client,
                config=fast_config(),
            )
        )

        assert result.summary_text == "Direct summary of the whole document."
        assert result.model_name.startswith("claude-haiku")
        assert result.total_chunks == 1
        assert asyncio.run(stores.records.get(record.id)).summary_text == result.summary_text

    def test_missing_document_raises(self):
        stores = Stores()
        record = SummaryRecord(user_id="u", original_name="x.txt", document_id="gone")
        asyncio.run(stores.records.save(record))
        client, _ = make_client()

        with pytest.raises(KeyError):
            asyncio.run(
                generate_and_store_summary(
                    record.id,
                    records=stores.records,
                    extractor=stores.extractor,
                    client=client,
                    config=fast_config(),
                )
            )


class TestListSummariesByUser:
    def test_newest_first_and_scoped_to_user(self):
        records = InMemoryRecordStore()
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for n, user in enumerate(["alice", "bob", "alice", "alice"]):
            asyncio.run(
                records.save(
                    SummaryRecord(
                        id=f"rec-{n}",
                        user_id=user,
                        original_name=f"doc-{n}.txt",
                        document_id=f"doc-{n}",
                        created_at=start + timedelta(days=n),
                    )
                )
            )

        summaries = asyncio.run(list_summaries_by_user("alice", records=records))

        assert [s.id for s in summaries] == ["rec-3", "rec-2", "rec-0"]
        assert asyncio.run(list_summaries_by_user("carol", records=records)) == []
