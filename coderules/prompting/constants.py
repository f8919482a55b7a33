"""Prompt text for the relevance oracle."""

from __future__ import annotations

FILE_JUDGMENT_SYSTEM_PROMPT = (
    "You are an assistant that selects which project documentation files are relevant "
    "to a software development task. You answer only with JSON."
)

FILE_JUDGMENT_INSTRUCTIONS = """\
Task: {task}

Documentation files:
{summaries}

For every file above decide whether it is plausibly relevant to the task.
When you are unsure, include the file: dropping a relevant document is worse
than keeping an irrelevant one.

Respond with a JSON array only, one object per file, in this shape:
[{{"fileIndex": 1, "include": true, "reasoning": "short justification"}}]
"""

CONTENT_FILTER_SYSTEM_PROMPT = (
    "You prune project documentation down to what matters for a development task. "
    "You return the kept documentation text exactly as written, with no commentary."
)

CONTENT_FILTER_INSTRUCTIONS = """\
Task: {task}

Keep the overwhelming majority of the document below. Always keep:
- code samples and snippets
- structural examples and configuration samples
- stated principles, guidelines, rules and standards
- architectural statements and decisions

Remove only sections that are clearly irrelevant to the task. If you are unsure
whether a section is relevant, keep it.

Return the remaining markdown verbatim. Do not wrap it in code fences, do not add
headings, notes or explanations. If nothing at all is relevant, return an empty
response.

Document:
{content}
"""


__all__ = [
    "CONTENT_FILTER_INSTRUCTIONS",
    "CONTENT_FILTER_SYSTEM_PROMPT",
    "FILE_JUDGMENT_INSTRUCTIONS",
    "FILE_JUDGMENT_SYSTEM_PROMPT",
]
