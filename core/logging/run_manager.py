"""Run-based log rotation manager.

A "run" is one summarization request (or one test module). The first write
to each module's log file inside a run rotates that file.

Usage:
    from core.logging import start_run, end_run

    start_run("summary-abc123")  # Triggers rotation on first log to each module
    try:
        # ... do work ...
    finally:
        end_run()
"""

from contextvars import ContextVar

# ContextVars so concurrent async runs don't share rotation state
_current_run_id: ContextVar[str | None] = ContextVar("current_run_id", default=None)
_rotated_this_run: ContextVar[set[str] | None] = ContextVar("rotated_this_run", default=None)

# Module names don't change, so this cache is shared across runs
_module_log_cache: dict[str, str] = {}

# Longest-prefix-match from module path to log file name.
# Unmapped first-party modules go to "misc.log".
MODULE_TO_LOG = {
    # Summarization workflow
    "workflows.document_summarization.chunking": "chunking",
    "workflows.document_summarization.scheduler": "scheduler",
    "workflows.document_summarization.service": "summary-service",
    "workflows.document_summarization": "summarization",
    # Shared workflow utilities
    "workflows.shared.llm_utils": "generation",
    "workflows.shared": "workflows-shared",
    # Core modules
    "core.config": "config",
    "core.logging": "logging-internal",
    # Entry points
    "scripts": "scripts",
    "testing": "testing",
}

_SORTED_PREFIXES = sorted(MODULE_TO_LOG.keys(), key=len, reverse=True)

# Top-level names treated as first-party by configure_logging()
FIRST_PARTY_ROOTS = ("workflows", "core", "scripts", "testing", "__main__")


def start_run(run_id: str) -> None:
    """Signal start of new run.

    Safe to call multiple times - subsequent calls reset the rotation tracking.

    Args:
        run_id: Unique identifier for this run (e.g., summary id, test name)
    """
    _current_run_id.set(run_id)
    _rotated_this_run.set(set())


def end_run() -> None:
    """Signal end of run.

    Rotation is triggered by start_run(), so a missing end_run() after a
    crash does not affect correctness.
    """
    _current_run_id.set(None)
    _rotated_this_run.set(None)


def get_current_run_id() -> str | None:
    """Get the current run ID, if any."""
    return _current_run_id.get()


def should_rotate(log_name: str) -> bool:
    """Check if rotation is needed for this log file.

    Returns True only inside a run, and only the first time a given log file
    is seen in that run. Marks the log as rotated.
    """
    run_id = _current_run_id.get()
    rotated = _rotated_this_run.get()

    if run_id is None or rotated is None:
        return False

    if log_name in rotated:
        return False

    rotated.add(log_name)
    return True


def is_first_party(module_name: str) -> bool:
    """True if the logger name belongs to this project."""
    root = module_name.split(".", 1)[0]
    return root in FIRST_PARTY_ROOTS


def module_to_log_name(module_name: str) -> str:
    """Resolve module path to log filename (cached).

    Args:
        module_name: The __name__ of the module
            (e.g., "workflows.document_summarization.reducer")

    Returns:
        Log file name without extension (e.g., "summarization")
    """
    if module_name not in _module_log_cache:
        _module_log_cache[module_name] = _compute_log_name(module_name)
    return _module_log_cache[module_name]


def _compute_log_name(module_name: str) -> str:
    for prefix in _SORTED_PREFIXES:
        if module_name.startswith(prefix):
            return MODULE_TO_LOG[prefix]
    return "misc"
