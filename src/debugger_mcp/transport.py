"""HTTP transport: JSON-RPC over POST plus an SSE event stream."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .protocol.dispatcher import ClientConnection
from .server import IDLE_CONNECTION_TIMEOUT, MCP_ENDPOINT_PATH, DebuggerMcpServer

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
SESSION_QUERY_PARAM = "sessionId"

# Limits for security
MAX_BODY_BYTES = 10_000_000  # 10MB max request size


def create_app(server: DebuggerMcpServer, path: str = MCP_ENDPOINT_PATH) -> Starlette:
    """Build the ASGI app serving ``path`` (requests) and ``path/sse`` (events).

    Clients either POST to ``path`` and carry the ``Mcp-Session-Id`` header
    returned by ``initialize``, or open the SSE stream first and POST to the
    endpoint it announces; those requests are answered 202 and the responses
    arrive on the stream.
    """
    path = "/" + path.strip("/")

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        server.start()
        try:
            yield
        finally:
            server.stop()

    async def handle_post(request: Request) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > MAX_BODY_BYTES:
            logger.error(f"Request body too large: {declared} bytes declared")
            return JSONResponse({"error": "Request body too large"}, status_code=413)

        server.connections.evict_idle(IDLE_CONNECTION_TIMEOUT)
        connection = _find_connection(server, request)
        if isinstance(connection, Response):
            return connection
        connection.touch()

        body = await request.body()
        if len(body) > MAX_BODY_BYTES:
            logger.error(f"Request body too large: {len(body)} bytes")
            return JSONResponse({"error": "Request body too large"}, status_code=413)

        response = await server.dispatcher.dispatch(body, connection)

        if connection.events is not None:
            if response is not None:
                await connection.events.put(response)
            return Response(status_code=202)

        if connection.initialized and server.connections.get(connection.id) is None:
            server.connections.add(connection)
        if response is None:
            return Response(status_code=202)
        headers = {SESSION_HEADER: connection.id} if connection.initialized else None
        return JSONResponse(response, headers=headers)

    async def handle_delete(request: Request) -> Response:
        session_id = request.headers.get(SESSION_HEADER)
        if not session_id or server.connections.remove(session_id) is None:
            return JSONResponse({"error": "Unknown session"}, status_code=404)
        logger.info(f"Client {session_id} closed its session")
        return Response(status_code=204)

    async def handle_sse(request: Request) -> Response:
        connection = ClientConnection(events=asyncio.Queue())
        server.connections.add(connection)
        endpoint = f"{path}?{SESSION_QUERY_PARAM}={connection.id}"
        logger.info(f"SSE client {connection.id} connected")
        return EventSourceResponse(_event_stream(server, connection, endpoint))

    routes = [
        Route(path, handle_post, methods=["POST"]),
        Route(path, handle_delete, methods=["DELETE"]),
        Route(f"{path}/sse", handle_sse, methods=["GET"]),
    ]
    return Starlette(routes=routes, lifespan=lifespan)


def _find_connection(server: DebuggerMcpServer, request: Request) -> ClientConnection | Response:
    session_id = request.query_params.get(SESSION_QUERY_PARAM) or request.headers.get(SESSION_HEADER)
    if session_id is None:
        return ClientConnection()
    connection = server.connections.get(session_id)
    if connection is None:
        return JSONResponse({"error": f"Unknown session: {session_id}"}, status_code=404)
    return connection


async def _event_stream(
    server: DebuggerMcpServer, connection: ClientConnection, endpoint: str
) -> AsyncIterator[dict[str, Any]]:
    try:
        yield {"event": "endpoint", "data": endpoint}
        while True:
            message = await connection.events.get()
            yield {"event": "message", "data": json.dumps(message)}
    finally:
        server.connections.remove(connection.id)
        logger.info(f"SSE client {connection.id} disconnected")
