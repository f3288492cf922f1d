"""Bounded-concurrency chunk summarization with repair and fallback.

Each chunk becomes a ChunkJob (PENDING -> SUCCEEDED | FAILED). Jobs run in
waves of `concurrency_limit`; a wave settles completely before the next is
dispatched. Every job gets `max_retries` backoff retries inside its wave.
Jobs still FAILED afterwards are retried once more, sequentially, on a
truncated copy of their text. Whatever still fails gets a deterministic
fallback extract, so every chunk ends up with exactly one section.
"""

import logging
from typing import Optional

from core.config import SummarizationConfig
from core.errors import AuthInvalidError, GenerationError, RequestTooLargeError
from workflows.shared.async_utils import run_in_batches
from workflows.shared.retry_utils import with_retry

from .sections import SectionSummarizer, build_fallback_summary
from .state import Chunk, ChunkJob, ChunkStatus, SectionSummary

logger = logging.getLogger(__name__)


def _is_retryable(error: Exception) -> bool:
    return getattr(error, "retryable", False)


class BatchScheduler:
    """Drives per-chunk summarization jobs for one document.

    Args:
        summarizer: Section summarizer (wraps the shared generation client)
        config: Concurrency, retry, repair and fallback settings
    """

    def __init__(
        self,
        summarizer: SectionSummarizer,
        config: Optional[SummarizationConfig] = None,
    ):
        self.summarizer = summarizer
        self.config = config or SummarizationConfig()

    async def _run_job(self, job: ChunkJob, total: int, model: Optional[str]) -> ChunkJob:
        """Initial attempt plus in-batch retries. Records the outcome on the job."""

        async def attempt() -> str:
            job.record_attempt()
            return await self.summarizer.summarize_chunk(
                job.chunk.text, job.index, total, model=model
            )

        def log_failure(attempt_number: int, error: Exception) -> None:
            logger.warning(
                f"Section {job.index + 1}/{total} attempt {attempt_number} failed: "
                f"{error.__class__.__name__}: {error}"
            )

        try:
            summary = await with_retry(
                attempt,
                max_attempts=1 + self.config.max_retries,
                backoff_base=self.config.retry_backoff_base,
                retry_on=GenerationError,
                should_retry=_is_retryable,
                on_failure=log_failure,
            )
        except Exception as e:
            job.fail(e)
        else:
            job.succeed(summary)
        return job

    def _repair_input(self, job: ChunkJob) -> str:
        """Leading slice of the chunk for the repair attempt.

        Normally the first `repair_chunk_chars`. A chunk that was rejected as
        too large and is already within that size is halved instead, so the
        repair never resends the rejected input.
        """
        text = job.chunk.text
        truncated = text[: self.config.repair_chunk_chars]
        if len(truncated) == len(text) and isinstance(job.error, RequestTooLargeError):
            truncated = text[: len(text) // 2]
        return truncated

    async def _repair(self, job: ChunkJob, total: int, model: Optional[str]) -> None:
        """One sequential attempt on a truncated copy of the chunk."""
        truncated = self._repair_input(job)
        if not truncated.strip():
            logger.warning(f"Section {job.index + 1}/{total} too short to repair")
            return
        job.record_attempt()
        try:
            summary = await self.summarizer.summarize_chunk(
                truncated, job.index, total, model=model
            )
        except AuthInvalidError:
            raise
        except Exception as e:
            logger.error(f"Repair of section {job.index + 1}/{total} failed: {e}")
            job.fail(e)
        else:
            logger.info(
                f"Repaired section {job.index + 1}/{total} from {len(truncated):,} chars"
            )
            job.succeed(summary)

    def _to_section(self, job: ChunkJob) -> SectionSummary:
        if job.status == ChunkStatus.SUCCEEDED and job.summary is not None:
            return SectionSummary(index=job.index, text=job.summary)
        return SectionSummary(
            index=job.index,
            text=build_fallback_summary(
                job.chunk.text, job.index, self.config.fallback_preview_chars
            ),
            is_fallback=True,
        )

    async def process_all(
        self,
        chunks: list[Chunk],
        model: Optional[str] = None,
    ) -> tuple[list[SectionSummary], bool]:
        """
        Summarize every chunk.

        Returns:
            (sections in chunk order, all_sections_included). The flag is
            False if any section is a fallback extract.

        Raises:
            AuthInvalidError: credentials rejected; raised once the current
                batch has settled.
        """
        jobs = [ChunkJob(chunk=chunk) for chunk in sorted(chunks, key=lambda c: c.index)]
        total = len(jobs)
        if not jobs:
            return [], True

        limit = self.config.concurrency_limit
        logger.info(
            f"Summarizing {total} sections in {(total + limit - 1) // limit} batches "
            f"of up to {limit}"
        )

        # Batch phase: waves of `limit` jobs, each wave a barrier
        await run_in_batches(
            jobs,
            lambda job: self._run_job(job, total, model),
            batch_size=limit,
            pause_seconds=self.config.batch_pause_seconds,
            stop_after=lambda settled: any(
                isinstance(getattr(job, "error", None), AuthInvalidError)
                for job in settled
            ),
        )

        for job in jobs:
            if isinstance(job.error, AuthInvalidError):
                raise job.error

        # Repair phase: sequential, truncated input
        failed = [job for job in jobs if job.status == ChunkStatus.FAILED]
        if failed:
            logger.warning(
                f"{len(failed)}/{total} sections failed in batches, starting repair pass: "
                f"{[job.index + 1 for job in failed]}"
            )
            for job in failed:
                await self._repair(job, total, model)

        sections = [self._to_section(job) for job in jobs]
        fallback_count = sum(1 for section in sections if section.is_fallback)
        all_included = fallback_count == 0

        if fallback_count:
            logger.warning(
                f"{fallback_count}/{total} sections use fallback extracts"
            )
        logger.info(
            f"Section summarization complete: {total - fallback_count}/{total} summarized, "
            f"{sum(job.attempts for job in jobs)} backend attempts"
        )
        return sections, all_included
