"""LLM response parsing utilities."""

from typing import Any


def extract_response_content(response: Any) -> str:
    """Extract text content from various LLM response formats.

    Handles plain string content and lists of content blocks (dicts or
    objects with a `text` attribute). Non-text blocks are skipped.
    """
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict):
                if block.get("type", "text") == "text":
                    parts.append(block.get("text", ""))
            elif getattr(block, "type", "text") == "text" and hasattr(block, "text"):
                parts.append(block.text)
        return "".join(parts).strip()
    return str(content).strip()
