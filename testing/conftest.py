"""
Pytest configuration for summarization tests.

Usage:
    pytest testing/
    pytest testing/test_batch_scheduler.py
"""

from collections.abc import Generator

import pytest

from core.logging import end_run, start_run


@pytest.fixture(autouse=True)
def logging_run(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Rotate logs at test module boundaries.

    Each test module gets its own logging run, which triggers log rotation
    on first write to each module's log file.

    When running with pytest-xdist, each worker uses a separate log directory
    to prevent file corruption from concurrent writes.
    """
    import os

    worker_id = os.environ.get("PYTEST_XDIST_WORKER")
    if worker_id:
        os.environ["DOCSUM_LOG_DIR"] = f"logs/test-{worker_id}"

    # Use test module path as run identifier (e.g., "test-testing-test_chunking")
    test_path = request.node.nodeid.split("::")[0]
    test_name = test_path.replace("/", "-").replace(".py", "")
    start_run(f"test-{test_name}")
    yield
    end_run()


@pytest.fixture(autouse=True)
def no_langsmith(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tracing off regardless of the developer's environment."""
    monkeypatch.setenv("LANGSMITH_TRACING", "false")
