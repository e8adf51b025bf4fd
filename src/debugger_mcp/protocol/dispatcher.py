"""JSON-RPC request dispatcher for the MCP methods the server supports."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from mcp.types import (
    CallToolRequestParams,
    Implementation,
    InitializeResult,
    ListToolsResult,
    ServerCapabilities,
    ToolsCapability,
)
from pydantic import ValidationError

from ..errors import ProtocolError
from ..tools.base import ToolContext
from ..tools.registry import ToolRegistry
from .messages import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    NOT_INITIALIZED,
    PARSE_ERROR,
    JsonRpcRequest,
    Methods,
    dump,
    error_response,
    success_response,
)

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26")

Handler = Callable[[dict[str, Any], "ClientConnection"], Awaitable[dict[str, Any]]]


@dataclass
class ClientConnection:
    """Handshake state of one logical client.

    ``events`` is set for clients attached through the SSE stream; their
    responses are pushed there instead of returned in the POST reply.
    """
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    initialized: bool = False
    protocol_version: str | None = None
    client_info: dict[str, Any] | None = None
    events: asyncio.Queue[dict[str, Any]] | None = None
    last_active: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_active = time.monotonic()


class McpDispatcher:
    """Routes JSON-RPC envelopes to the initialize, ping and tools handlers."""

    def __init__(
        self,
        registry: ToolRegistry,
        context_factory: Callable[[], ToolContext],
        server_info: Implementation,
        instructions: str | None = None,
    ):
        self._registry = registry
        self._context_factory = context_factory
        self._server_info = server_info
        self._instructions = instructions
        self._handlers: dict[str, Handler] = {
            Methods.INITIALIZE: self._initialize,
            Methods.PING: self._ping,
            Methods.TOOLS_LIST: self._list_tools,
            Methods.TOOLS_CALL: self._call_tool,
        }

    async def dispatch(
        self, payload: str | bytes, connection: ClientConnection
    ) -> dict[str, Any] | None:
        """Handle one raw message; returns the response envelope, or None for notifications."""
        try:
            data = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning(f"Unparseable request: {e}")
            return error_response(None, PARSE_ERROR, f"Parse error: {e}")

        if not isinstance(data, dict):
            return error_response(None, INVALID_REQUEST, "Invalid request: expected a JSON object")

        try:
            request = JsonRpcRequest.model_validate(data)
        except ValidationError as e:
            request_id = data.get("id")
            if not isinstance(request_id, (int, str)) or isinstance(request_id, bool):
                request_id = None
            return error_response(request_id, INVALID_REQUEST, f"Invalid request: {_first_error(e)}")

        if request.is_notification:
            self._notify(request, connection)
            return None

        return await self.handle_request(request, connection)

    async def handle_request(
        self, request: JsonRpcRequest, connection: ClientConnection
    ) -> dict[str, Any]:
        logger.debug(f">>> {request.method} (id={request.id})")
        handler = self._handlers.get(request.method)
        if handler is None:
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        if request.method != Methods.INITIALIZE and not connection.initialized:
            return error_response(request.id, NOT_INITIALIZED, "Server not initialized")

        try:
            result = await handler(request.params or {}, connection)
        except ProtocolError as e:
            return error_response(request.id, e.code, e.message)
        except Exception as e:
            logger.exception(f"Error handling {request.method}")
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {e}")

        return success_response(request.id, result)

    def _notify(self, request: JsonRpcRequest, connection: ClientConnection) -> None:
        if request.method == Methods.INITIALIZED:
            logger.debug(f"Client {connection.id} confirmed initialization")
        else:
            logger.debug(f"Ignoring notification {request.method}")

    async def _initialize(self, params: dict[str, Any], connection: ClientConnection) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else DEFAULT_PROTOCOL_VERSION
        client_info = params.get("clientInfo")

        connection.initialized = True
        connection.protocol_version = version
        connection.client_info = client_info if isinstance(client_info, dict) else None
        name = connection.client_info.get("name") if connection.client_info else "unknown"
        logger.info(f"Client {connection.id} ({name}) initialized with protocol {version}")

        result = InitializeResult(
            protocolVersion=version,
            capabilities=ServerCapabilities(tools=ToolsCapability(listChanged=False)),
            serverInfo=self._server_info,
            instructions=self._instructions,
        )
        return dump(result)

    async def _ping(self, params: dict[str, Any], connection: ClientConnection) -> dict[str, Any]:
        return {}

    async def _list_tools(self, params: dict[str, Any], connection: ClientConnection) -> dict[str, Any]:
        return dump(ListToolsResult(tools=self._registry.definitions()))

    async def _call_tool(self, params: dict[str, Any], connection: ClientConnection) -> dict[str, Any]:
        try:
            call = CallToolRequestParams.model_validate(params)
        except ValidationError as e:
            raise ProtocolError(INVALID_PARAMS, f"Invalid params: {_first_error(e)}") from None

        tool = self._registry.get(call.name)
        if tool is None:
            raise ProtocolError(INVALID_PARAMS, f"Unknown tool: {call.name}")

        logger.info(f"Calling tool {call.name}")
        result = await tool.invoke(call.arguments, self._context_factory())
        if result.isError:
            logger.info(f"Tool {call.name} returned an error")
        return dump(result)


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
