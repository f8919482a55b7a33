"""The ``coderules`` tool definition, its input model and call routing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .formatter import ToolResponse, format_error

if TYPE_CHECKING:  # pragma: no cover
    from .pipeline import CodeRulesPipeline

TOOL_NAME = "coderules"

TOOL_DESCRIPTION = """\
A tool for extracting relevant coding rules and guidelines from a documentation repository.
This tool analyzes a collection of markdown files and returns contextually relevant information based on a given task.

When to use this tool:
- When implementing new features that need to follow project guidelines
- When modifying existing code and need to understand the project's conventions
- When reviewing code to ensure compliance with established standards
- When onboarding to a new project and need to understand its coding standards

Parameters explained:
- task: Description of what you're trying to do (implement feature, fix bug, etc.)
- docsPath: Path to the directory containing markdown documentation files"""

TOOL_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "task": {
            "type": "string",
            "description": "Description of the task you're working on",
        },
        "docsPath": {
            "type": "string",
            "description": "Path to the documentation directory",
        },
    },
    "required": ["task", "docsPath"],
}

_FIELD_MESSAGES = {
    "task": "Task description is required",
    "docsPath": "Documentation path is required",
}


class InputValidationError(ValueError):
    """Raised when tool arguments are missing or malformed."""


class CodeRulesInput(BaseModel):
    """Validated arguments of a ``coderules`` call."""

    model_config = ConfigDict(populate_by_name=True)

    task: str = Field(min_length=1)
    docs_path: str = Field(alias="docsPath", min_length=1)


def parse_input(arguments: Optional[Mapping[str, Any]]) -> CodeRulesInput:
    if not isinstance(arguments, Mapping):
        raise InputValidationError("Tool arguments must be an object with task and docsPath")
    try:
        return CodeRulesInput.model_validate(dict(arguments))
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error.get("loc") else ""
            message = _FIELD_MESSAGES.get(field, error.get("msg", "Invalid value"))
            if message not in messages:
                messages.append(message)
        raise InputValidationError("; ".join(messages)) from exc


async def handle_tool_call(
    pipeline: "CodeRulesPipeline",
    tool_name: str,
    arguments: Optional[Mapping[str, Any]],
) -> ToolResponse:
    """Route a tool call to the pipeline; unknown tools yield an error response."""
    if tool_name == TOOL_NAME:
        return await pipeline.process_request(arguments)
    return format_error(f"Unknown tool: {tool_name}")


__all__ = [
    "CodeRulesInput",
    "InputValidationError",
    "TOOL_DESCRIPTION",
    "TOOL_INPUT_SCHEMA",
    "TOOL_NAME",
    "handle_tool_call",
    "parse_input",
]
