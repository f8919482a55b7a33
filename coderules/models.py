"""Core data models shared across coderules components."""

from dataclasses import dataclass, replace
from typing import List, Optional


@dataclass(frozen=True)
class DocumentMetadata:
    """Metadata for a discovered documentation file.

    Instances are immutable; the relevance score is assigned once, at file
    filtering time, by producing a stamped copy through :meth:`with_score`.
    """

    filename: str
    path: str
    title: Optional[str] = None
    tags: Optional[List[str]] = None
    relevance_score: Optional[float] = None

    def with_score(self, score: float) -> "DocumentMetadata":
        if self.relevance_score == score:
            return self
        if self.relevance_score is not None:
            raise ValueError(f"Relevance score already assigned for {self.path}")
        return replace(self, relevance_score=score)


@dataclass
class RelevantContent:
    """Filtered content for one surviving file, ready for assembly."""

    file: str
    content: str


@dataclass
class Verdict:
    """Per-file include/exclude decision from a batched relevance judgment."""

    file_index: int
    include: Optional[bool] = None
    reasoning: str = ""
