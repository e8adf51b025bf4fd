"""Run configuration and run session tools."""

from __future__ import annotations

import logging
from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..ide import RunProcess
from .base import (
    McpTool,
    ToolContext,
    mutable,
    object_schema,
    optional_str,
    read_only,
    session_id_property,
)

logger = logging.getLogger(__name__)

RUN_MODES = ("run", "debug")


class ListRunConfigurationsTool(McpTool):
    name = "list_run_configurations"
    description = (
        "Lists all run/debug configurations available in the project.\n"
        "Use this to discover configuration names before starting a debug session.\n"
        "Returns configuration name, type, and whether it can be run or debugged."
    )
    input_schema = object_schema({})
    annotations = read_only("List Run Configurations")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        runs = context.ide.runs
        selected = runs.selected_configuration()
        configurations = [
            {
                "name": configuration.name,
                "type": configuration.type_name,
                "typeId": configuration.type_id,
                "isTemporary": configuration.is_temporary,
                "canRun": configuration.can_run,
                "canDebug": configuration.can_debug,
                "folder": configuration.folder,
                "description": configuration.description,
            }
            for configuration in runs.configurations()
        ]
        return self.result({
            "configurations": configurations,
            "activeConfiguration": selected.name if selected else None,
        })


class RunConfigurationTool(McpTool):
    name = "run_configuration"
    description = (
        "Launches a run configuration in run or debug mode.\n"
        "Use list_run_configurations to discover configuration names."
    )
    input_schema = object_schema(
        {
            "configuration_name": {"type": "string", "description": "Name of the run configuration"},
            "mode": {
                "type": "string",
                "enum": list(RUN_MODES),
                "description": "Execution mode. Default: run",
            },
        },
        required=["configuration_name"],
    )
    annotations = mutable("Run Configuration")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        configuration_name = optional_str(arguments, "configuration_name")
        mode = (optional_str(arguments, "mode") or "run").lower()
        if mode not in RUN_MODES:
            raise ToolError(f"Invalid mode: {mode} (expected run or debug)")

        runs = context.ide.runs
        configuration = runs.find_configuration(configuration_name)
        if configuration is None:
            raise ToolError(f"Run configuration not found: {configuration_name}")

        debug = mode == "debug"
        if debug and not configuration.can_debug:
            raise ToolError(f"Run configuration '{configuration_name}' cannot be debugged")
        if not debug and not configuration.can_run:
            raise ToolError(f"Run configuration '{configuration_name}' cannot be run")

        await context.on_ui_thread(runs.execute, configuration, debug)
        logger.info(f"Launched '{configuration_name}' in {mode} mode")
        return self.result({
            "configurationName": configuration.name,
            "mode": mode,
            "status": "started",
            "message": f"Started '{configuration.name}' in {mode} mode",
        })


def run_session_info(process: RunProcess) -> dict[str, Any]:
    return {
        "id": process.id,
        "name": process.name,
        "state": "stopped" if process.is_terminated else "running",
        "processId": process.process_id(),
    }


class ListRunSessionsTool(McpTool):
    name = "list_run_sessions"
    description = (
        "Lists all active run sessions with their IDs, names, and states.\n"
        "Use to discover session IDs when multiple run sessions are running."
    )
    input_schema = object_schema({}, additional_properties=False)
    annotations = read_only("List Run Sessions")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        sessions = [run_session_info(process) for process in context.ide.runs.running_processes()]
        return self.result({"sessions": sessions, "totalCount": len(sessions)})


class StopRunSessionTool(McpTool):
    name = "stop_run_session"
    description = (
        "Terminates a run session, stopping the running process.\n"
        "session_id may be a run session ID or an OS process ID.\n"
        "This is a destructive operation that cannot be undone."
    )
    input_schema = object_schema(session_id_property(), additional_properties=False)
    annotations = mutable("Stop Run Session", destructive=True)

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        process = context.resolve_run_session(arguments)

        if process.is_terminated:
            return self.result({
                "sessionId": process.id,
                "status": "already_stopped",
                "message": f"Run session '{process.name}' was already stopped",
            })

        try:
            await context.on_ui_thread(process.destroy)
        except Exception as e:
            raise ToolError(f"Failed to stop session: {e}") from e
        return self.result({
            "sessionId": process.id,
            "status": "stopped",
            "message": f"Run session '{process.name}' stopped",
        })
