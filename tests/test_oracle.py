"""Tests for the text-runner backed relevance oracle."""

from __future__ import annotations

import asyncio

import pytest

from coderules.oracle import LLMRelevanceOracle, OracleError, RelevanceOracle
from coderules.prompting.builder import VerdictParseError
from coderules.prompting.constants import (
    CONTENT_FILTER_SYSTEM_PROMPT,
    FILE_JUDGMENT_SYSTEM_PROMPT,
)
from tests._fixtures.oracles import RecordingOracle, ScriptedRunner


def test_judge_files_sends_batched_prompt_and_parses_verdicts() -> None:
    runner = ScriptedRunner.excluding(2, excluded=[2])
    oracle = LLMRelevanceOracle(runner)

    verdicts = asyncio.run(oracle.judge_files("task", ["1. a.md", "2. b.md"]))

    assert [(v.file_index, v.include) for v in verdicts] == [(1, True), (2, False)]
    assert len(runner.calls) == 1
    assert runner.calls[0]["system"] == FILE_JUDGMENT_SYSTEM_PROMPT
    assert "2. b.md" in runner.calls[0]["prompt"]


def test_judge_files_raises_parse_error_on_prose() -> None:
    oracle = LLMRelevanceOracle(ScriptedRunner("All of them look useful."))

    with pytest.raises(VerdictParseError):
        asyncio.run(oracle.judge_files("task", ["1. a.md"]))


def test_judge_content_strips_markdown_fence() -> None:
    runner = ScriptedRunner("[]", content_reply="```markdown\n## Kept\n\nbody\n```")
    oracle = LLMRelevanceOracle(runner)

    pruned = asyncio.run(oracle.judge_content("task", "# Doc"))

    assert pruned == "## Kept\n\nbody"
    assert runner.calls[0]["system"] == CONTENT_FILTER_SYSTEM_PROMPT


def test_runner_failures_surface_as_oracle_errors() -> None:
    class FailingRunner:
        def run(self, prompt: str, *, system: str | None = None) -> str:
            raise RuntimeError("LLM HTTP runner failed: connection refused")

    oracle = LLMRelevanceOracle(FailingRunner())

    with pytest.raises(OracleError, match="connection refused"):
        asyncio.run(oracle.judge_content("task", "text"))


def test_oracle_implementations_satisfy_protocol() -> None:
    assert isinstance(LLMRelevanceOracle(ScriptedRunner("[]")), RelevanceOracle)
    assert isinstance(RecordingOracle(), RelevanceOracle)
