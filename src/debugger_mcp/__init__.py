"""MCP server exposing an IDE debugger to automation agents."""

__version__ = "1.0.0"
