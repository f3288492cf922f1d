"""
Tests for with_retry backoff and batched async dispatch.
"""

import asyncio

import pytest

from workflows.shared.async_utils import run_in_batches
from workflows.shared.retry_utils import backoff_delay, with_retry


class Flaky:
    """Coroutine factory failing the first `failures` calls."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or RuntimeError("transient")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "done"


class TestBackoffDelay:
    def test_exponential(self):
        assert backoff_delay(0) == 1.0
        assert backoff_delay(1) == 2.0
        assert backoff_delay(2) == 4.0
        assert backoff_delay(1, base=0.5, factor=3.0) == 1.5


class TestWithRetry:
    """Tests for with_retry."""

    def test_succeeds_after_transient_failures(self):
        fn = Flaky(failures=2)
        assert asyncio.run(with_retry(fn, max_attempts=3, backoff_base=0)) == "done"
        assert fn.calls == 3

    def test_raises_last_error_unwrapped(self):
        error = ValueError("always")
        fn = Flaky(failures=10, error=error)
        with pytest.raises(ValueError) as exc_info:
            asyncio.run(with_retry(fn, max_attempts=3, backoff_base=0))
        assert exc_info.value is error
        assert fn.calls == 3

    def test_should_retry_false_stops_immediately(self):
        fn = Flaky(failures=10)
        with pytest.raises(RuntimeError):
            asyncio.run(
                with_retry(fn, max_attempts=5, backoff_base=0, should_retry=lambda e: False)
            )
        assert fn.calls == 1

    def test_unlisted_exceptions_propagate_without_retry(self):
        fn = Flaky(failures=10, error=KeyError("x"))
        with pytest.raises(KeyError):
            asyncio.run(with_retry(fn, max_attempts=3, backoff_base=0, retry_on=ValueError))
        assert fn.calls == 1

    def test_on_failure_sees_each_attempt(self):
        seen = []
        fn = Flaky(failures=2)
        asyncio.run(
            with_retry(
                fn,
                max_attempts=3,
                backoff_base=0,
                on_failure=lambda attempt, error: seen.append(attempt),
            )
        )
        assert seen == [1, 2]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            asyncio.run(with_retry(Flaky(0), max_attempts=0))


class TestRunInBatches:
    """Tests for run_in_batches."""

    def test_results_in_input_order(self):
        async def worker(n: int) -> int:
            await asyncio.sleep(0.001 * (10 - n))
            return n * n

        results = asyncio.run(run_in_batches(list(range(10)), worker, batch_size=3))
        assert results == [n * n for n in range(10)]

    def test_exceptions_are_captured_in_place(self):
        async def worker(n: int) -> int:
            if n == 2:
                raise RuntimeError("bad item")
            return n

        results = asyncio.run(run_in_batches([0, 1, 2, 3], worker, batch_size=2))
        assert results[:2] == [0, 1]
        assert isinstance(results[2], RuntimeError)
        assert results[3] == 3

    def test_batch_is_a_barrier(self):
        in_flight = 0
        peak = 0
        started = []

        async def worker(n: int) -> None:
            nonlocal in_flight, peak
            started.append(n)
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1

        asyncio.run(run_in_batches(list(range(12)), worker, batch_size=5))
        assert peak == 5
        assert sorted(started) == list(range(12))

    def test_stop_after_skips_remaining_batches(self):
        seen = []

        async def worker(n: int) -> int:
            seen.append(n)
            return n

        results = asyncio.run(
            run_in_batches(
                list(range(10)),
                worker,
                batch_size=4,
                stop_after=lambda batch: 5 in batch,
            )
        )
        assert results == list(range(8))
        assert sorted(seen) == list(range(8))

    def test_rejects_zero_batch_size(self):
        async def worker(n: int) -> int:
            return n

        with pytest.raises(ValueError):
            asyncio.run(run_in_batches([1], worker, batch_size=0))
