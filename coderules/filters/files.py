"""File-level relevance filtering over the discovered documentation set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

from ..config import DEFAULT_SMALL_BATCH_THRESHOLD
from ..logging import get_logger
from ..models import DocumentMetadata, Verdict
from ..oracle import RelevanceOracle
from ..prompting.builder import VerdictParseError, build_file_summaries

FileFilterStatus = Literal["empty", "short_circuit", "filtered", "fallback"]

RELEVANT_SCORE = 1.0


@dataclass
class FileFilterResult:
    """Outcome of a file filtering pass, tagged with the branch that produced it."""

    files: List[DocumentMetadata]
    status: FileFilterStatus
    reason: Optional[str] = None
    verdicts: Optional[List[Verdict]] = None


class FileRelevanceFilter:
    """Reduces the candidate set with a single batched oracle judgment."""

    def __init__(
        self,
        oracle: RelevanceOracle,
        *,
        small_batch_threshold: int = DEFAULT_SMALL_BATCH_THRESHOLD,
    ) -> None:
        self.oracle = oracle
        self.small_batch_threshold = small_batch_threshold
        self.logger = get_logger("filters.files")

    async def filter(self, files: List[DocumentMetadata], task: str) -> FileFilterResult:
        if not files:
            return FileFilterResult(files=[], status="empty")

        if len(files) <= self.small_batch_threshold:
            self.logger.debug("Keeping all %d files without a relevance judgment", len(files))
            return FileFilterResult(
                files=[file.with_score(RELEVANT_SCORE) for file in files],
                status="short_circuit",
            )

        summaries = build_file_summaries(files)
        try:
            verdicts = await self.oracle.judge_files(task, summaries)
        except VerdictParseError as exc:
            self.logger.warning("Unparsable file relevance verdicts; keeping all files: %s", exc)
            return FileFilterResult(files=files, status="fallback", reason="unparsable_verdicts")
        except Exception as exc:
            self.logger.warning("File relevance judgment failed; keeping all files: %s", exc)
            return FileFilterResult(files=files, status="fallback", reason="oracle_error")

        return FileFilterResult(
            files=self._apply_verdicts(files, verdicts),
            status="filtered",
            verdicts=verdicts,
        )

    def _apply_verdicts(
        self, files: Sequence[DocumentMetadata], verdicts: Sequence[Verdict]
    ) -> List[DocumentMetadata]:
        by_index: Dict[int, Verdict] = {}
        for verdict in verdicts:
            by_index.setdefault(verdict.file_index, verdict)

        kept: List[DocumentMetadata] = []
        for index, file in enumerate(files, start=1):
            verdict = by_index.get(index)
            if verdict is not None and verdict.include is False:
                self.logger.debug("Excluding %s: %s", file.filename, verdict.reasoning or "no reason given")
                continue
            kept.append(file.with_score(RELEVANT_SCORE))
        return kept


async def filter_relevant_files(
    files: List[DocumentMetadata], task: str, oracle: RelevanceOracle
) -> List[DocumentMetadata]:
    """Return the files worth expanding for ``task``."""
    result = await FileRelevanceFilter(oracle).filter(files, task)
    return result.files


__all__ = [
    "FileFilterResult",
    "FileFilterStatus",
    "FileRelevanceFilter",
    "RELEVANT_SCORE",
    "filter_relevant_files",
]
