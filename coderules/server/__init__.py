"""MCP transport for the coderules tool."""

from .stdio import StdioMCPServer

__all__ = ["StdioMCPServer"]
