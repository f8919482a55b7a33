"""Tests for the file relevance filter."""

from __future__ import annotations

import asyncio

import pytest

from coderules.filters.files import FileRelevanceFilter, filter_relevant_files
from coderules.models import DocumentMetadata, Verdict
from coderules.oracle import OracleError
from coderules.prompting.builder import VerdictParseError
from tests._fixtures.oracles import RecordingOracle


def _files(count: int) -> list[DocumentMetadata]:
    return [
        DocumentMetadata(filename=f"doc{index}.md", path=f"/docs/doc{index}.md")
        for index in range(1, count + 1)
    ]


def test_empty_input_makes_no_oracle_call() -> None:
    oracle = RecordingOracle()
    result = asyncio.run(FileRelevanceFilter(oracle).filter([], "task"))

    assert result.files == []
    assert result.status == "empty"
    assert oracle.file_calls == []


@pytest.mark.parametrize("count", [1, 2, 3])
def test_small_batches_short_circuit_with_scores(count: int) -> None:
    oracle = RecordingOracle(file_error=OracleError("must not be called"))
    files = _files(count)

    result = asyncio.run(FileRelevanceFilter(oracle).filter(files, "task"))

    assert result.status == "short_circuit"
    assert [file.path for file in result.files] == [file.path for file in files]
    assert all(file.relevance_score == 1.0 for file in result.files)
    assert oracle.file_calls == []
    # caller-owned metadata stays unscored
    assert all(file.relevance_score is None for file in files)


def test_refiltering_scored_files_keeps_them() -> None:
    first = asyncio.run(FileRelevanceFilter(RecordingOracle()).filter(_files(2), "task"))

    second = asyncio.run(FileRelevanceFilter(RecordingOracle()).filter(first.files, "task"))

    assert second.status == "short_circuit"
    assert second.files == first.files


def test_conflicting_score_is_rejected() -> None:
    scored = _files(1)[0].with_score(0.5)

    assert scored.with_score(0.5) is scored
    with pytest.raises(ValueError):
        scored.with_score(1.0)


def test_batched_judgment_uses_one_call_with_indexed_summaries() -> None:
    files = _files(4)
    files[1] = DocumentMetadata(
        filename="doc2.md", path="/docs/doc2.md", title="Logging", tags=["logging", "errors"]
    )
    oracle = RecordingOracle([Verdict(file_index=i, include=True) for i in range(1, 5)])

    asyncio.run(FileRelevanceFilter(oracle).filter(files, "refactor logging"))

    assert len(oracle.file_calls) == 1
    call = oracle.file_calls[0]
    assert call["task"] == "refactor logging"
    assert call["summaries"] == [
        "1. doc1.md",
        "2. doc2.md - Title: Logging - Tags: logging, errors",
        "3. doc3.md",
        "4. doc4.md",
    ]


def test_excludes_only_files_judged_false_and_keeps_missing_verdicts() -> None:
    files = _files(6)
    oracle = RecordingOracle(
        [
            Verdict(file_index=1, include=True),
            Verdict(file_index=2, include=False, reasoning="deployment only"),
            Verdict(file_index=4, include=None),
            Verdict(file_index=5, include=False),
            Verdict(file_index=42, include=False),
        ]
    )

    result = asyncio.run(FileRelevanceFilter(oracle).filter(files, "task"))

    assert result.status == "filtered"
    assert [file.filename for file in result.files] == ["doc1.md", "doc3.md", "doc4.md", "doc6.md"]
    assert all(file.relevance_score == 1.0 for file in result.files)


def test_oracle_error_returns_input_unchanged() -> None:
    files = _files(5)
    oracle = RecordingOracle(file_error=OracleError("backend down"))

    result = asyncio.run(FileRelevanceFilter(oracle).filter(files, "task"))

    assert result.status == "fallback"
    assert result.reason == "oracle_error"
    assert result.files is files
    assert all(file.relevance_score is None for file in result.files)


def test_unparsable_verdicts_fall_back_with_reason() -> None:
    files = _files(5)
    oracle = RecordingOracle(file_error=VerdictParseError("no list"))

    result = asyncio.run(FileRelevanceFilter(oracle).filter(files, "task"))

    assert result.status == "fallback"
    assert result.reason == "unparsable_verdicts"
    assert result.files is files


def test_small_batch_threshold_is_configurable() -> None:
    oracle = RecordingOracle([Verdict(file_index=1, include=False)])

    result = asyncio.run(
        FileRelevanceFilter(oracle, small_batch_threshold=1).filter(_files(2), "task")
    )

    assert len(oracle.file_calls) == 1
    assert [file.filename for file in result.files] == ["doc2.md"]


def test_filter_relevant_files_returns_plain_list() -> None:
    oracle = RecordingOracle([Verdict(file_index=3, include=False)])

    files = asyncio.run(filter_relevant_files(_files(4), "task", oracle))

    assert [file.filename for file in files] == ["doc1.md", "doc2.md", "doc4.md"]
