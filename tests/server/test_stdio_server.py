"""Tests for the stdio MCP server adapters."""

from __future__ import annotations

import asyncio
import json

import mcp.types as types
import pytest

from coderules.formatter import format_error, format_success
from coderules.pipeline import CodeRulesPipeline
from coderules.server import StdioMCPServer
from coderules.server.stdio import SERVER_NAME, ToolCallFailed, build_tool, to_text_contents
from coderules.tool import TOOL_INPUT_SCHEMA, TOOL_NAME
from tests._fixtures.oracles import RecordingOracle


def test_build_tool_exposes_name_and_schema() -> None:
    tool = build_tool()

    assert tool.name == TOOL_NAME
    assert tool.inputSchema == TOOL_INPUT_SCHEMA
    assert "markdown" in (tool.description or "")


def test_success_response_becomes_text_content() -> None:
    contents = to_text_contents(format_success("## a.md\n\nbody\n\n"))

    assert len(contents) == 1
    assert contents[0].type == "text"
    assert contents[0].text == "## a.md\n\nbody\n\n"


def test_error_response_raises_with_payload() -> None:
    with pytest.raises(ToolCallFailed) as excinfo:
        to_text_contents(format_error("Unknown tool: other"))

    assert '"error": "Unknown tool: other"' in str(excinfo.value)


def test_server_registers_under_expected_name() -> None:
    server = StdioMCPServer(CodeRulesPipeline(RecordingOracle()))

    assert server.server.name == SERVER_NAME


def _call_tool(server: StdioMCPServer, name: str, arguments: dict) -> types.CallToolResult:
    handler = server.server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    result = asyncio.run(handler(request))
    return result.root


def test_call_tool_missing_argument_returns_structured_error() -> None:
    oracle = RecordingOracle()
    server = StdioMCPServer(CodeRulesPipeline(oracle))

    result = _call_tool(server, TOOL_NAME, {"task": "t"})

    assert result.isError is True
    payload = json.loads(result.content[0].text)
    assert payload == {"error": "Documentation path is required", "status": "failed"}
    assert oracle.file_calls == []


def test_call_tool_returns_assembled_docs(docs_builder) -> None:
    docs_builder.write({"style.md": "Use black.\n"})
    server = StdioMCPServer(CodeRulesPipeline(RecordingOracle()))

    result = _call_tool(server, TOOL_NAME, {"task": "format", "docsPath": str(docs_builder.path())})

    assert not result.isError
    assert result.content[0].text == "## style.md\n\nUse black.\n\n\n"


def test_call_tool_unknown_name_returns_structured_error() -> None:
    server = StdioMCPServer(CodeRulesPipeline(RecordingOracle()))

    result = _call_tool(server, "other", {})

    assert result.isError is True
    assert json.loads(result.content[0].text)["error"] == "Unknown tool: other"
