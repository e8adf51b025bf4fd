"""Debug session tools."""

from __future__ import annotations

from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..session.frames import frame_info
from .base import McpTool, ToolContext, mutable, object_schema, optional_str, read_only, session_id_property


class ListDebugSessionsTool(McpTool):
    name = "list_debug_sessions"
    description = (
        "Lists all active debug sessions with their IDs, names, and states.\n"
        "Use to discover session IDs when multiple debug sessions are running."
    )
    input_schema = object_schema({}, additional_properties=False)
    annotations = read_only("List Debug Sessions")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        debugger = context.ide.debugger
        current = debugger.current_session()
        sessions = [
            {
                "id": session.id,
                "name": session.name,
                "state": session.state.value,
                "isCurrent": current is not None and session.id == current.id,
            }
            for session in debugger.sessions()
        ]
        return self.result({"sessions": sessions, "totalCount": len(sessions)})


class StartDebugSessionTool(McpTool):
    name = "start_debug_session"
    description = (
        "Starts a debug session for a run configuration.\n"
        "Use list_run_configurations to discover configuration names."
    )
    input_schema = object_schema(
        {
            "configuration_name": {
                "type": "string",
                "description": "Name of the run configuration to debug",
            },
        },
        required=["configuration_name"],
    )
    annotations = mutable("Start Debug Session")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        name = optional_str(arguments, "configuration_name")
        runs = context.ide.runs
        configuration = runs.find_configuration(name)
        if configuration is None:
            raise ToolError(f"Run configuration not found: {name}")
        if not configuration.can_debug:
            raise ToolError(f"Run configuration '{name}' cannot be debugged")

        await context.on_ui_thread(runs.execute, configuration, True)
        return self.result({
            "configurationName": configuration.name,
            "status": "started",
            "message": f"Debug session started for '{configuration.name}'",
        })


class StopDebugSessionTool(McpTool):
    name = "stop_debug_session"
    description = (
        "Stops an active debug session.\n"
        "If no session_id is provided, stops the current session.\n"
        "Use list_debug_sessions to see available sessions and their IDs."
    )
    input_schema = object_schema(session_id_property())
    annotations = mutable("Stop Debug Session", destructive=True)

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        session = context.resolve_session(arguments)

        if session.is_terminated:
            return self.result({
                "sessionId": session.id,
                "status": "already_stopped",
                "message": f"Debug session '{session.name}' was already stopped",
            })

        try:
            await context.on_ui_thread(session.stop)
        except Exception as e:
            raise ToolError(f"Failed to stop session: {e}") from e
        return self.result({
            "sessionId": session.id,
            "status": "stopped",
            "message": f"Debug session '{session.name}' stopped",
        })


class GetDebugSessionStatusTool(McpTool):
    name = "get_debug_session_status"
    description = (
        "Gets the state of a debug session: running, paused or terminated,\n"
        "and where execution is paused, if it is."
    )
    input_schema = object_schema(session_id_property())
    annotations = read_only("Get Debug Session Status")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        session = context.resolve_session(arguments)
        status: dict[str, Any] = {
            "sessionId": session.id,
            "name": session.name,
            "state": session.state.value,
            "isPaused": session.is_paused,
            "currentLocation": None,
            "currentFrame": None,
            "threadName": None,
        }

        if session.is_paused:
            position = session.current_position
            if position is not None:
                status["currentLocation"] = {"file": position.path, "line": position.line + 1}
            frame = session.current_stack_frame
            if frame is not None:
                status["currentFrame"] = frame_info(frame, 0).to_dict()
            suspend_context = session.suspend_context
            stack = suspend_context.active_execution_stack if suspend_context else None
            if stack is not None:
                status["threadName"] = stack.display_name

        return self.result(status)
