"""Breakpoint management tools."""

from __future__ import annotations

import logging
from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..ide import LineBreakpoint, SuspendPolicy
from ..session.state import BreakpointInfo
from .base import (
    McpTool,
    ToolContext,
    mutable,
    object_schema,
    optional_bool,
    optional_int,
    optional_str,
    read_only,
)

logger = logging.getLogger(__name__)


class ListBreakpointsTool(McpTool):
    name = "list_breakpoints"
    description = (
        "Lists all line breakpoints, optionally only those in one file.\n"
        "Returns location, condition, log message and enabled state for each."
    )
    input_schema = object_schema({
        "file_path": {
            "type": "string",
            "description": "Only list breakpoints in this file",
        },
    })
    annotations = read_only("List Breakpoints")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        file_path = optional_str(arguments, "file_path")
        breakpoints = [
            BreakpointInfo.from_breakpoint(bp)
            for bp in context.ide.breakpoints.line_breakpoints()
            if file_path is None or bp.file_path == file_path
        ]
        return self.result({
            "breakpoints": [bp.to_dict() for bp in breakpoints],
            "totalCount": len(breakpoints),
        })


class SetBreakpointTool(McpTool):
    name = "set_breakpoint"
    description = (
        "Sets a line breakpoint at the specified file and line.\n"
        "Supports conditions, log messages (tracepoints), and suspend policies.\n"
        "Use {expr} in log_message to evaluate expressions.\n"
        "Setting a breakpoint where one already exists updates it."
    )
    input_schema = object_schema(
        {
            "file_path": {"type": "string", "description": "Absolute path to the file"},
            "line": {"type": "integer", "description": "1-based line number", "minimum": 1},
            "condition": {
                "type": "string",
                "description": "Conditional expression (breakpoint only hits when true)",
            },
            "log_message": {
                "type": "string",
                "description": "Log message (tracepoint). Use {expr} for expression evaluation.",
            },
            "suspend_policy": {
                "type": "string",
                "enum": [policy.value for policy in SuspendPolicy],
                "description": "Thread suspend policy. Default: all",
            },
            "enabled": {"type": "boolean", "description": "Whether breakpoint is enabled. Default: true"},
            "temporary": {
                "type": "boolean",
                "description": "Remove after first hit. Default: false; kept as is when updating",
            },
        },
        required=["file_path", "line"],
    )
    annotations = mutable("Set Breakpoint")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        file_path = optional_str(arguments, "file_path")
        line = optional_int(arguments, "line")
        condition = optional_str(arguments, "condition")
        log_message = optional_str(arguments, "log_message")
        suspend_policy = parse_suspend_policy(optional_str(arguments, "suspend_policy"))
        enabled = optional_bool(arguments, "enabled", True)
        temporary = optional_bool(arguments, "temporary", None)

        ide = context.ide
        source_file = ide.files.find_file(file_path)
        if source_file is None:
            raise ToolError(f"File not found: {file_path}")

        line_index = line - 1
        if line_index < 0 or not ide.files.can_put_breakpoint_at(source_file, line_index):
            raise ToolError(
                f"Cannot set breakpoint at {file_path}:{line} (not a valid breakpoint location)"
            )

        manager = ide.breakpoints
        breakpoint = manager.find_line_breakpoint(source_file.path, line_index)
        status = "updated"
        if breakpoint is None:
            try:
                breakpoint = await context.on_ui_thread(
                    manager.add_line_breakpoint, source_file, line_index, bool(temporary)
                )
            except Exception as e:
                raise ToolError(f"Failed to set breakpoint: {e}") from e
            status = "set"

        await context.on_ui_thread(
            configure_breakpoint, breakpoint, enabled, condition, log_message, suspend_policy, temporary
        )
        logger.info(f"Breakpoint {status} at {source_file.path}:{line}")

        return self.result({
            "breakpointId": breakpoint.id,
            "status": status,
            "verified": True,
            "message": f"Breakpoint {status} at {source_file.name}:{line}",
            "file": file_path,
            "line": line,
        })


class RemoveBreakpointTool(McpTool):
    name = "remove_breakpoint"
    description = (
        "Removes a line breakpoint, identified either by breakpoint_id\n"
        "or by file_path and line."
    )
    input_schema = object_schema({
        "breakpoint_id": {"type": "string", "description": "ID returned by set_breakpoint or list_breakpoints"},
        "file_path": {"type": "string", "description": "Absolute path to the file"},
        "line": {"type": "integer", "description": "1-based line number", "minimum": 1},
    })
    annotations = mutable("Remove Breakpoint", destructive=True)

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        breakpoint_id = optional_str(arguments, "breakpoint_id")
        file_path = optional_str(arguments, "file_path")
        line = optional_int(arguments, "line")
        manager = context.ide.breakpoints

        if breakpoint_id is not None:
            breakpoint = next(
                (bp for bp in manager.line_breakpoints() if bp.id == breakpoint_id), None
            )
            if breakpoint is None:
                raise ToolError(f"Breakpoint not found: {breakpoint_id}")
        elif file_path is not None and line is not None:
            breakpoint = manager.find_line_breakpoint(file_path, line - 1)
            if breakpoint is None:
                raise ToolError(f"No breakpoint at {file_path}:{line}")
        else:
            raise ToolError("Provide breakpoint_id, or file_path and line")

        info = BreakpointInfo.from_breakpoint(breakpoint)
        await context.on_ui_thread(manager.remove_breakpoint, breakpoint)
        return self.result({
            "breakpointId": info.id,
            "status": "removed",
            "file": info.file,
            "line": info.line,
        })


def parse_suspend_policy(value: str | None) -> SuspendPolicy | None:
    if value is None:
        return None
    try:
        return SuspendPolicy(value.lower())
    except ValueError:
        raise ToolError(
            f"Invalid suspend_policy: {value} (expected one of: all, thread, none)"
        ) from None


def configure_breakpoint(
    breakpoint: LineBreakpoint,
    enabled: bool,
    condition: str | None,
    log_message: str | None,
    suspend_policy: SuspendPolicy | None,
    temporary: bool | None = None,
) -> None:
    """Apply breakpoint properties; runs on the UI thread."""
    breakpoint.enabled = enabled
    if condition is not None:
        breakpoint.condition = condition
    if log_message is not None:
        breakpoint.log_expression = log_message
    if suspend_policy is not None:
        breakpoint.suspend_policy = suspend_policy
    if temporary is not None:
        breakpoint.temporary = temporary
