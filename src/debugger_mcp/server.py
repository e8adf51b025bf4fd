"""MCP server instance: tool registry, dispatcher and client connections."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from mcp.types import Implementation

from . import __version__
from .ide import IdeServices
from .protocol.dispatcher import ClientConnection, McpDispatcher
from .session.resolver import SessionResolver
from .tools.base import ToolContext
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "ide-debugger"
MCP_ENDPOINT_PATH = "/debugger-mcp"
SSE_ENDPOINT_PATH = f"{MCP_ENDPOINT_PATH}/sse"

# Request-only clients that never send DELETE are dropped after this long
IDLE_CONNECTION_TIMEOUT = 30 * 60

INSTRUCTIONS = (
    "Use these tools to drive the IDE debugger: list and start debug sessions, "
    "set breakpoints, step, and inspect stack frames and variables."
)


class ConnectionTable:
    """Thread-safe table of client connections by id."""

    def __init__(self) -> None:
        self._connections: dict[str, ClientConnection] = {}
        self._lock = threading.Lock()

    def add(self, connection: ClientConnection) -> None:
        with self._lock:
            self._connections[connection.id] = connection

    def get(self, connection_id: str) -> ClientConnection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def remove(self, connection_id: str) -> ClientConnection | None:
        with self._lock:
            return self._connections.pop(connection_id, None)

    def evict_idle(self, max_idle: float, now: float | None = None) -> list[str]:
        """Drop request-only connections unused for ``max_idle`` seconds.

        Stream connections are left alone; they leave when their stream closes.
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            stale = [
                connection_id
                for connection_id, connection in self._connections.items()
                if connection.events is None and now - connection.last_active > max_idle
            ]
            for connection_id in stale:
                del self._connections[connection_id]
        if stale:
            logger.info(f"Evicted {len(stale)} idle connections")
        return stale

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


class DebuggerMcpServer:
    """One MCP server bound to one IDE.

    Created by the integration layer, started once and stopped once; holds
    no process-wide state.
    """

    def __init__(self, ide: IdeServices, name: str = SERVER_NAME, version: str = __version__):
        self.ide = ide
        self.name = name
        self.registry = ToolRegistry()
        self.connections = ConnectionTable()
        self.resolver = SessionResolver(ide.debugger, ide.runs)
        self.dispatcher = McpDispatcher(
            self.registry,
            self.tool_context,
            Implementation(name=name, version=version),
            instructions=INSTRUCTIONS,
        )
        self._owned_executor: ThreadPoolExecutor | None = None
        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started

    def start(self) -> None:
        """Register built-in tools and prepare the UI executor."""
        if self._started:
            return
        if self.ide.ui_executor is None:
            self._owned_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ide-ui")
            self.ide.ui_executor = self._owned_executor
        self.registry.register_builtin_tools()
        self._started = True
        logger.info(f"MCP server '{self.name}' started with {self.registry.count()} tools")

    def stop(self) -> None:
        if not self._started:
            return
        self.connections.clear()
        if self._owned_executor is not None:
            self._owned_executor.shutdown(wait=False)
            self.ide.ui_executor = None
            self._owned_executor = None
        self._started = False
        logger.info(f"MCP server '{self.name}' stopped")

    def tool_context(self) -> ToolContext:
        return ToolContext(ide=self.ide, resolver=self.resolver)
