"""Tool registry - thread-safe mapping of tool names to tools."""

from __future__ import annotations

import logging
import threading

from mcp.types import Tool

from .base import McpTool
from .breakpoints import ListBreakpointsTool, RemoveBreakpointTool, SetBreakpointTool
from .execution import PauseTool, ResumeTool, StepIntoTool, StepOutTool, StepOverTool
from .runconfig import (
    ListRunConfigurationsTool,
    ListRunSessionsTool,
    RunConfigurationTool,
    StopRunSessionTool,
)
from .session import (
    GetDebugSessionStatusTool,
    ListDebugSessionsTool,
    StartDebugSessionTool,
    StopDebugSessionTool,
)
from .stack import GetStackTraceTool, SelectStackFrameTool
from .variables import EvaluateTool, ExpandVariableTool, GetVariablesTool

logger = logging.getLogger(__name__)

BUILTIN_TOOLS: tuple[type[McpTool], ...] = (
    # Run configurations
    ListRunConfigurationsTool,
    RunConfigurationTool,
    ListRunSessionsTool,
    StopRunSessionTool,
    # Debug sessions
    ListDebugSessionsTool,
    StartDebugSessionTool,
    StopDebugSessionTool,
    GetDebugSessionStatusTool,
    # Breakpoints
    ListBreakpointsTool,
    SetBreakpointTool,
    RemoveBreakpointTool,
    # Execution control
    ResumeTool,
    PauseTool,
    StepOverTool,
    StepIntoTool,
    StepOutTool,
    # Stack frames
    GetStackTraceTool,
    SelectStackFrameTool,
    # Variables and evaluation
    GetVariablesTool,
    ExpandVariableTool,
    EvaluateTool,
)


class ToolRegistry:
    """Thread-safe registry of tools, keyed by name.

    Registering a name twice replaces the earlier tool. Callers keep the
    tool object they looked up, so unregistering never affects a call that
    is already running.
    """

    def __init__(self) -> None:
        self._tools: dict[str, McpTool] = {}
        self._lock = threading.Lock()

    def register(self, tool: McpTool) -> None:
        with self._lock:
            replaced = tool.name in self._tools
            self._tools[tool.name] = tool
        if replaced:
            logger.debug(f"Replaced tool {tool.name}")

    def unregister(self, name: str) -> None:
        with self._lock:
            self._tools.pop(name, None)

    def get(self, name: str) -> McpTool | None:
        with self._lock:
            return self._tools.get(name)

    def list(self) -> list[McpTool]:
        """Snapshot of the registered tools."""
        with self._lock:
            return list(self._tools.values())

    def definitions(self) -> list[Tool]:
        return [tool.definition() for tool in self.list()]

    def count(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools

    def register_builtin_tools(self) -> None:
        """Populate the built-in tool set; called once at server start."""
        for tool_class in BUILTIN_TOOLS:
            self.register(tool_class())
        logger.info(f"Registered {len(BUILTIN_TOOLS)} built-in tools")
