"""Variable inspection and expression evaluation tools."""

from __future__ import annotations

from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..ide import DebugSession, StackFrame, Value
from ..session.frames import (
    collect_child_values,
    collect_stack_frames,
    collect_variables,
    compute_presentation,
    evaluate_expression,
)
from .base import (
    McpTool,
    ToolContext,
    frame_index_property,
    object_schema,
    optional_int,
    optional_str,
    read_only,
    require_paused,
    session_id_property,
)
from .stack import active_stack

DEFAULT_MAX_CHILDREN = 100


async def frame_at(session: DebugSession, frame_index: int) -> StackFrame:
    if frame_index < 0:
        raise ToolError(f"Invalid frame_index: {frame_index}")
    if frame_index == 0:
        frame = session.current_stack_frame
    else:
        frames = await collect_stack_frames(active_stack(session), frame_index + 1)
        frame = frames[frame_index] if frame_index < len(frames) else None
    if frame is None:
        raise ToolError(f"No stack frame available at index {frame_index}")
    return frame


class GetVariablesTool(McpTool):
    name = "get_variables"
    description = (
        "Gets all variables visible in the current stack frame.\n"
        "Returns variable names, values, types, and whether they have children (expandable).\n"
        "Use expand_variable to see children of complex objects."
    )
    input_schema = object_schema(
        {**session_id_property(), "frame_index": frame_index_property()},
        additional_properties=False,
    )
    annotations = read_only("Get Variables")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        frame_index = optional_int(arguments, "frame_index", 0)
        session = context.resolve_session(arguments)
        require_paused(session, "get variables")
        frame = await frame_at(session, frame_index)

        collected = await collect_variables(frame)
        return self.result({
            "sessionId": session.id,
            "frameIndex": frame_index,
            "variables": [variable.to_dict() for variable in collected.items],
        })


class ExpandVariableTool(McpTool):
    name = "expand_variable"
    description = (
        "Expands a structured variable to show its children (fields, elements).\n"
        "variable_path is dot separated from a variable visible in the frame,\n"
        "e.g. 'user.address'."
    )
    input_schema = object_schema(
        {
            **session_id_property(),
            "variable_path": {
                "type": "string",
                "description": "Dot-separated path to the variable, e.g. 'user.address'",
            },
            "frame_index": frame_index_property(),
            "max_children": {
                "type": "integer",
                "description": f"Maximum number of children to return. Default: {DEFAULT_MAX_CHILDREN}",
                "minimum": 1,
            },
        },
        required=["variable_path"],
    )
    annotations = read_only("Expand Variable")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        variable_path = optional_str(arguments, "variable_path")
        frame_index = optional_int(arguments, "frame_index", 0)
        max_children = max(optional_int(arguments, "max_children", DEFAULT_MAX_CHILDREN), 1)

        names = [part for part in variable_path.split(".") if part]
        if not names:
            raise ToolError(f"Invalid variable_path: {variable_path}")

        session = context.resolve_session(arguments)
        require_paused(session, "expand variables")
        frame = await frame_at(session, frame_index)

        value = await self._walk(frame, names)
        # One extra child tells whether the list was cut short.
        collected = await collect_variables(value, limit=max_children + 1)
        children = collected.items[:max_children]
        return self.result({
            "sessionId": session.id,
            "variablePath": variable_path,
            "name": names[-1],
            "children": [child.to_dict() for child in children],
            "hasMore": len(collected.items) > max_children or collected.remaining > 0,
        })

    @staticmethod
    async def _walk(frame: StackFrame, names: list[str]) -> Value:
        owner: StackFrame | Value = frame
        for depth, name in enumerate(names):
            children = await collect_child_values(owner)
            match = next((value for child_name, value in children if child_name == name), None)
            if match is None:
                path = ".".join(names[: depth + 1])
                raise ToolError(f"Variable not found: {path}")
            owner = match
        return owner


class EvaluateTool(McpTool):
    name = "evaluate"
    description = (
        "Evaluates an expression in the context of a stack frame.\n"
        "Returns the result value, its type, and whether it can be expanded."
    )
    input_schema = object_schema(
        {
            **session_id_property(),
            "expression": {"type": "string", "description": "Expression to evaluate"},
            "frame_index": frame_index_property(),
        },
        required=["expression"],
    )
    annotations = read_only("Evaluate Expression")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        expression = optional_str(arguments, "expression")
        frame_index = optional_int(arguments, "frame_index", 0)

        session = context.resolve_session(arguments)
        require_paused(session, "evaluate expressions")
        frame = await frame_at(session, frame_index)

        outcome = await evaluate_expression(frame, expression)
        if outcome.error_message is not None:
            raise ToolError(f"Evaluation failed: {outcome.error_message}")
        if not outcome.items:
            raise ToolError(f"Evaluation timed out: {expression}")

        presentation = await compute_presentation(outcome.items[0])
        if presentation is None:
            raise ToolError(f"Evaluation result could not be rendered: {expression}")

        return self.result({
            "sessionId": session.id,
            "expression": expression,
            "result": presentation.value,
            "type": presentation.type or "unknown",
            "hasChildren": presentation.has_children,
        })
