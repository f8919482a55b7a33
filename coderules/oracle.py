"""Relevance oracle capability and its text-generation backed implementation."""

from __future__ import annotations

import asyncio
import functools
from typing import List, Protocol, Sequence, runtime_checkable

from .logging import get_logger
from .models import Verdict
from .prompting.builder import (
    Prompt,
    VerdictParseError,
    build_content_prompt,
    build_file_judgment_prompt,
    parse_verdicts,
    strip_code_fence,
)


class OracleError(RuntimeError):
    """Raised when the oracle backend fails to produce a judgment."""


class TextRunner(Protocol):
    """Anything that can turn a prompt into completion text."""

    def run(self, prompt: str, *, system: str | None = None) -> str: ...


@runtime_checkable
class RelevanceOracle(Protocol):
    """Capability that judges file relevance and prunes document content."""

    async def judge_files(self, task: str, summaries: Sequence[str]) -> List[Verdict]:
        """Return per-file verdicts for the numbered ``summaries``.

        Raises :class:`VerdictParseError` when no verdict list can be recovered.
        """
        ...

    async def judge_content(self, task: str, text: str) -> str:
        """Return ``text`` with clearly irrelevant sections removed."""
        ...


class LLMRelevanceOracle:
    """Relevance oracle backed by a blocking text runner such as :class:`LLMRunner`."""

    def __init__(self, runner: TextRunner) -> None:
        self.runner = runner
        self.logger = get_logger("oracle")

    async def judge_files(self, task: str, summaries: Sequence[str]) -> List[Verdict]:
        prompt = build_file_judgment_prompt(task, summaries)
        raw = await self._complete(prompt)
        verdicts = parse_verdicts(raw)
        self.logger.debug("Oracle returned %d verdicts for %d files", len(verdicts), len(summaries))
        return verdicts

    async def judge_content(self, task: str, text: str) -> str:
        prompt = build_content_prompt(task, text)
        raw = await self._complete(prompt)
        return strip_code_fence(raw, languages=("markdown", "md")).strip()

    async def _complete(self, prompt: Prompt) -> str:
        loop = asyncio.get_running_loop()
        call = functools.partial(self.runner.run, prompt.user, system=prompt.system)
        try:
            return await loop.run_in_executor(None, call)
        except RuntimeError as exc:
            raise OracleError(str(exc)) from exc


__all__ = [
    "LLMRelevanceOracle",
    "OracleError",
    "RelevanceOracle",
    "TextRunner",
    "VerdictParseError",
]
