"""JSON-RPC 2.0 envelopes and MCP result helpers."""

from __future__ import annotations

import json
from typing import Any, Literal

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    CallToolResult,
    TextContent,
)
from pydantic import BaseModel, ConfigDict

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "NOT_INITIALIZED",
    "PARSE_ERROR",
    "JsonRpcRequest",
    "RequestId",
    "error_response",
    "error_result",
    "json_result",
    "success_response",
    "text_result",
]

JSONRPC_VERSION = "2.0"

# Server-defined error range; used for requests sent before initialize
NOT_INITIALIZED = -32002

RequestId = int | str


class Methods:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    method: str
    id: RequestId | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


def success_response(request_id: RequestId | None, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: RequestId | None, code: int, message: str, data: Any = None
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def text_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def json_result(payload: dict[str, Any]) -> CallToolResult:
    """Successful result carrying ``payload`` as pretty-printed JSON text."""
    return text_result(json.dumps(payload, indent=2))


def dump(model: BaseModel) -> dict[str, Any]:
    """Serialize an MCP model the way it goes on the wire."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
