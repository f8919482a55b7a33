"""Assembly of filtered content and tool response envelopes."""

from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from .models import RelevantContent

NO_RELEVANT_DOCS = "No relevant documentation found for this task."
SECTION_SEPARATOR = "---\n\n"

ToolResponse = Dict[str, Any]


def format_output(items: Sequence[RelevantContent]) -> str:
    """Merge per-file content, in the given order, into one markdown document."""
    if not items:
        return NO_RELEVANT_DOCS
    return SECTION_SEPARATOR.join(f"## {item.file}\n\n{item.content}\n\n" for item in items)


def format_success(text: str) -> ToolResponse:
    return {"content": [{"type": "text", "text": text}]}


def format_error(error: BaseException | str) -> ToolResponse:
    message = str(error) if isinstance(error, BaseException) else error
    payload = json.dumps({"error": message, "status": "failed"}, indent=2)
    return {"content": [{"type": "text", "text": payload}], "isError": True}


__all__ = [
    "NO_RELEVANT_DOCS",
    "SECTION_SEPARATOR",
    "ToolResponse",
    "format_error",
    "format_output",
    "format_success",
]
