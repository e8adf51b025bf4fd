"""MCP tools for debugging."""

from .base import McpTool, ToolContext
from .registry import BUILTIN_TOOLS, ToolRegistry

__all__ = [
    "BUILTIN_TOOLS",
    "McpTool",
    "ToolContext",
    "ToolRegistry",
]
