"""Stdio MCP server exposing the ``coderules`` tool.

Nothing may be written to stdout outside the JSON-RPC stream; logging goes to
stderr (see :func:`coderules.logging.configure_logging`).
"""

from __future__ import annotations

from typing import Any, List

import mcp.server.stdio
import mcp.types as types
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions

from ..formatter import ToolResponse
from ..logging import get_logger
from ..pipeline import CodeRulesPipeline
from ..tool import TOOL_DESCRIPTION, TOOL_INPUT_SCHEMA, TOOL_NAME, handle_tool_call

SERVER_NAME = "code-rules-mcp"
SERVER_VERSION = "0.0.1"


class ToolCallFailed(RuntimeError):
    """Carries an error payload so the SDK reports the call with ``isError``."""


def build_tool() -> types.Tool:
    return types.Tool(
        name=TOOL_NAME,
        description=TOOL_DESCRIPTION,
        inputSchema=TOOL_INPUT_SCHEMA,
    )


def to_text_contents(response: ToolResponse) -> List[types.TextContent]:
    """Convert a pipeline response envelope into MCP text content.

    Error envelopes are raised as :class:`ToolCallFailed`; the SDK turns the
    exception message into a text result flagged with ``isError``.
    """
    texts = [item["text"] for item in response.get("content", []) if item.get("type") == "text"]
    if response.get("isError"):
        raise ToolCallFailed("\n".join(texts))
    return [types.TextContent(type="text", text=text) for text in texts]


class StdioMCPServer:
    """MCP server speaking JSON-RPC over stdin/stdout."""

    def __init__(self, pipeline: CodeRulesPipeline) -> None:
        self.pipeline = pipeline
        self.logger = get_logger("server.stdio")
        self.server: Server = Server(SERVER_NAME)
        self._register_tools()

    def _register_tools(self) -> None:
        @self.server.list_tools()  # type: ignore[misc]
        async def list_tools() -> list[types.Tool]:
            return [build_tool()]

        # parse_input owns argument validation so errors keep the JSON error payload.
        @self.server.call_tool(validate_input=False)  # type: ignore[misc]
        async def call_tool(tool_name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
            response = await handle_tool_call(self.pipeline, tool_name, arguments)
            return to_text_contents(response)

    async def run(self) -> None:
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=SERVER_VERSION,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            self.logger.info("Code Rules MCP Server running on stdio")
            await self.server.run(read_stream, write_stream, init_options)


__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "StdioMCPServer",
    "ToolCallFailed",
    "build_tool",
    "to_text_contents",
]
