"""Builds oracle prompts and parses structured verdicts out of raw responses."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..models import DocumentMetadata, Verdict
from .constants import (
    CONTENT_FILTER_INSTRUCTIONS,
    CONTENT_FILTER_SYSTEM_PROMPT,
    FILE_JUDGMENT_INSTRUCTIONS,
    FILE_JUDGMENT_SYSTEM_PROMPT,
)

_FENCE_RE = re.compile(r"^```([\w-]*)\s*\n(.*?)\n```\s*$", re.DOTALL)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_INDEX_KEYS = ("fileIndex", "file_index", "index")


class VerdictParseError(ValueError):
    """Raised when no well-formed verdict list can be found in an oracle response."""


@dataclass(frozen=True)
class Prompt:
    """A system/user prompt pair ready for a runner."""

    system: str
    user: str


def build_file_summary(index: int, file: DocumentMetadata) -> str:
    """Return the one-line summary used to describe a file in batched judgments."""
    line = f"{index}. {file.filename}"
    if file.title:
        line += f" - Title: {file.title}"
    if file.tags:
        line += f" - Tags: {', '.join(file.tags)}"
    return line


def build_file_summaries(files: Iterable[DocumentMetadata]) -> List[str]:
    return [build_file_summary(index, file) for index, file in enumerate(files, start=1)]


def build_file_judgment_prompt(task: str, summaries: Sequence[str]) -> Prompt:
    user = FILE_JUDGMENT_INSTRUCTIONS.format(task=task, summaries="\n".join(summaries))
    return Prompt(system=FILE_JUDGMENT_SYSTEM_PROMPT, user=user)


def build_content_prompt(task: str, content: str) -> Prompt:
    user = CONTENT_FILTER_INSTRUCTIONS.format(task=task, content=content)
    return Prompt(system=CONTENT_FILTER_SYSTEM_PROMPT, user=user)


def parse_verdicts(raw: str) -> List[Verdict]:
    """Extract the verdict list from a raw oracle response.

    Entries that are not objects or carry no usable index are skipped; they
    simply leave their file without a verdict.
    """
    payload = _load_json_array(raw)
    verdicts: List[Verdict] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        index = _as_index(item)
        if index is None:
            continue
        include = item.get("include")
        reasoning = item.get("reasoning")
        verdicts.append(
            Verdict(
                file_index=index,
                include=include if isinstance(include, bool) else None,
                reasoning=reasoning if isinstance(reasoning, str) else "",
            )
        )
    return verdicts


def strip_code_fence(text: str, languages: Optional[Iterable[str]] = None) -> str:
    """Remove a single code fence wrapping the whole response.

    When ``languages`` is given only fences labelled with one of them are removed.
    """
    match = _FENCE_RE.match(text.strip())
    if not match:
        return text
    if languages is not None and match.group(1).lower() not in set(languages):
        return text
    return match.group(2)


def _load_json_array(raw: str) -> list:
    text = strip_code_fence(raw or "").strip()
    candidates = [text]
    match = _ARRAY_RE.search(text)
    if match and match.group(0) != text:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            loaded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(loaded, dict):
            loaded = loaded.get("verdicts")
        if isinstance(loaded, list):
            return loaded
    raise VerdictParseError("Oracle response did not contain a verdict list")


def _as_index(item: dict) -> Optional[int]:
    for key in _INDEX_KEYS:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
    return None


__all__ = [
    "Prompt",
    "VerdictParseError",
    "build_content_prompt",
    "build_file_judgment_prompt",
    "build_file_summaries",
    "build_file_summary",
    "parse_verdicts",
    "strip_code_fence",
]
