"""Stack inspection tools."""

from __future__ import annotations

from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..ide import DebugSession, ExecutionStack
from ..session.frames import collect_stack_frames, frame_info
from .base import (
    McpTool,
    ToolContext,
    mutable,
    object_schema,
    optional_int,
    read_only,
    require_paused,
    session_id_property,
)

DEFAULT_MAX_FRAMES = 50
MAX_FRAMES_LIMIT = 200


def active_stack(session: DebugSession) -> ExecutionStack:
    suspend_context = session.suspend_context
    if suspend_context is None:
        raise ToolError("No suspend context available")
    stack = suspend_context.active_execution_stack
    if stack is None:
        raise ToolError("No execution stack available")
    return stack


class GetStackTraceTool(McpTool):
    name = "get_stack_trace"
    description = (
        "Gets the call stack (stack trace) for the current thread.\n"
        "Returns stack frames with file, line, class, and method information.\n"
        "Use to understand the call path that led to the current execution point."
    )
    input_schema = object_schema({
        **session_id_property(),
        "max_frames": {
            "type": "integer",
            "description": f"Maximum number of frames to return. Default: {DEFAULT_MAX_FRAMES}",
            "minimum": 1,
            "maximum": MAX_FRAMES_LIMIT,
        },
    })
    annotations = read_only("Get Stack Trace")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        max_frames = optional_int(arguments, "max_frames", DEFAULT_MAX_FRAMES)
        max_frames = min(max(max_frames, 1), MAX_FRAMES_LIMIT)

        session = context.resolve_session(arguments)
        require_paused(session, "get stack trace")
        stack = active_stack(session)

        frames = await collect_stack_frames(stack, max_frames)
        infos = [frame_info(frame, index).to_dict() for index, frame in enumerate(frames)]
        return self.result({
            "sessionId": session.id,
            "threadId": stack.display_name,
            "frames": infos,
            "totalFrames": len(infos),
        })


class SelectStackFrameTool(McpTool):
    name = "select_stack_frame"
    description = (
        "Selects a specific stack frame as the current context for variable inspection and evaluation.\n"
        "Use get_stack_trace first to see available frames and their indices.\n"
        "Frame index 0 is the current (topmost) frame."
    )
    input_schema = object_schema(
        {
            **session_id_property(),
            "frame_index": {
                "type": "integer",
                "description": "Index of the stack frame to select (0 = topmost)",
                "minimum": 0,
            },
        },
        required=["frame_index"],
    )
    annotations = mutable("Select Stack Frame")

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        frame_index = optional_int(arguments, "frame_index")
        if frame_index < 0:
            raise ToolError(f"Invalid frame_index: {frame_index}")

        session = context.resolve_session(arguments)
        require_paused(session, "select stack frame")
        stack = active_stack(session)

        frames = await collect_stack_frames(stack, frame_index + 1)
        if frame_index >= len(frames):
            raise ToolError(f"Frame index {frame_index} out of bounds (max: {len(frames) - 1})")

        target = frames[frame_index]
        await context.on_ui_thread(session.set_current_stack_frame, stack, target)

        return self.result({
            "sessionId": session.id,
            "frameIndex": frame_index,
            "frame": frame_info(target, frame_index, is_current=True).to_dict(),
            "message": f"Selected frame {frame_index}",
        })
