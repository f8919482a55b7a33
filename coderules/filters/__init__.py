"""Relevance filters applied to documentation files and their content."""

from .content import (
    ContentFilterResult,
    ContentRelevanceFilter,
    filter_relevant_content,
)
from .files import (
    RELEVANT_SCORE,
    FileFilterResult,
    FileRelevanceFilter,
    filter_relevant_files,
)

__all__ = [
    "ContentFilterResult",
    "ContentRelevanceFilter",
    "FileFilterResult",
    "FileRelevanceFilter",
    "RELEVANT_SCORE",
    "filter_relevant_content",
    "filter_relevant_files",
]
