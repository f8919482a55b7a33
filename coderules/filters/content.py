"""Per-document content pruning with memoisation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from ..config import DEFAULT_SHORT_CONTENT_THRESHOLD
from ..logging import get_logger
from ..oracle import RelevanceOracle
from ..stores.filter_cache import FilterCache, make_cache_key

ContentFilterStatus = Literal["empty", "cached", "short", "pruned", "fallback"]


@dataclass
class ContentFilterResult:
    """Filtered text tagged with the branch that produced it."""

    content: str
    status: ContentFilterStatus
    reason: Optional[str] = None


class ContentRelevanceFilter:
    """Prunes a document down to the parts relevant for a task."""

    def __init__(
        self,
        oracle: RelevanceOracle,
        cache: FilterCache | None = None,
        *,
        short_content_threshold: int = DEFAULT_SHORT_CONTENT_THRESHOLD,
    ) -> None:
        self.oracle = oracle
        self.cache = cache if cache is not None else FilterCache()
        self.short_content_threshold = short_content_threshold
        self.logger = get_logger("filters.content")

    async def filter(self, content: str, task: str) -> ContentFilterResult:
        if not content.strip():
            return ContentFilterResult(content="", status="empty")

        key = make_cache_key(content, task)
        cached = self.cache.get(key)
        if cached is not None:
            return ContentFilterResult(content=cached, status="cached")

        if len(content) < self.short_content_threshold:
            return ContentFilterResult(content=content, status="short")

        try:
            pruned = await self.oracle.judge_content(task, content)
        except Exception as exc:
            self.logger.warning("Content filtering failed; keeping full content: %s", exc)
            return ContentFilterResult(content=content, status="fallback", reason="oracle_error")

        self.cache.store(key, pruned)
        self.logger.debug("Pruned content from %d to %d characters", len(content), len(pruned))
        return ContentFilterResult(content=pruned, status="pruned")


async def filter_relevant_content(
    content: str,
    task: str,
    oracle: RelevanceOracle,
    cache: FilterCache | None = None,
) -> str:
    """Return the parts of ``content`` relevant to ``task``."""
    result = await ContentRelevanceFilter(oracle, cache).filter(content, task)
    return result.content


__all__ = [
    "ContentFilterResult",
    "ContentFilterStatus",
    "ContentRelevanceFilter",
    "filter_relevant_content",
]
