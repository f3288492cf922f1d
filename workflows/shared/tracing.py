"""Tracing utilities for LangSmith integration.

Usage:
    from workflows.shared.tracing import workflow_traceable, merge_trace_config

    @workflow_traceable(name="SummarizeDocument", workflow_type="summarization")
    async def summarize(text: str, model: str) -> SummarizationResult:
        add_trace_metadata({"document_chars": len(text)})
        result = await graph.ainvoke(state, config=merge_trace_config(config))
"""

from typing import Any, Callable, TypeVar

from langsmith import get_current_run_tree, traceable

F = TypeVar("F", bound=Callable[..., Any])


def workflow_traceable(name: str, workflow_type: str) -> Callable[[F], F]:
    """Decorator for workflow entry points.

    Creates a root trace with a `workflow:<type>` tag for filtering.
    """
    return traceable(
        run_type="chain",
        name=name,
        tags=[f"workflow:{workflow_type}"],
    )


def get_trace_config() -> dict[str, Any]:
    """Config dict that links a graph invocation to the current trace.

    Returns an empty dict when no trace is active.
    """
    config: dict[str, Any] = {}
    if run_tree := get_current_run_tree():
        config["callbacks"] = run_tree.get_child_callbacks()
    return config


def merge_trace_config(existing_config: dict[str, Any] | None) -> dict[str, Any]:
    """Add parent-trace callbacks to an existing config dict.

    Example:
        config = {"configurable": {"generation_client": client}}
        result = await graph.ainvoke(state, config=merge_trace_config(config))
    """
    trace_config = get_trace_config()
    if existing_config is None:
        return trace_config

    merged = dict(existing_config)
    if "callbacks" in trace_config:
        if "callbacks" in merged and merged["callbacks"]:
            if isinstance(merged["callbacks"], list):
                merged["callbacks"] = merged["callbacks"] + trace_config["callbacks"]
            else:
                merged["callbacks"] = [merged["callbacks"]] + trace_config["callbacks"]
        else:
            merged["callbacks"] = trace_config["callbacks"]
    return merged


def add_trace_metadata(metadata: dict[str, Any]) -> None:
    """Attach runtime metadata to the current trace, if any."""
    if run_tree := get_current_run_tree():
        run_tree.add_metadata(metadata)
