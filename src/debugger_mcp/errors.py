"""Exceptions raised inside the server and converted at its boundaries."""

from __future__ import annotations


class ToolError(Exception):
    """A tool call failed in a way the client should see as ``isError``."""


class ProtocolError(Exception):
    """A request failed before reaching a tool; becomes a JSON-RPC error."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
