"""Execution control tools: resume, pause and stepping."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any

from mcp.types import CallToolResult

from ..errors import ToolError
from ..ide import DebugSession
from .base import McpTool, ToolContext, mutable, object_schema, require_paused, session_id_property

logger = logging.getLogger(__name__)


class ExecutionControlTool(McpTool):
    """Resolves the session, checks its state and runs one action on the UI thread."""

    action: str = ""
    message: str = ""
    new_state: str = "running"
    input_schema = object_schema(session_id_property(), additional_properties=False)

    def check_state(self, session: DebugSession) -> None:
        require_paused(session, self.action.replace("_", " "))

    @abstractmethod
    def perform(self, session: DebugSession) -> None:
        """Run the action; called on the UI thread."""

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        session = context.resolve_session(arguments)
        self.check_state(session)

        try:
            await context.on_ui_thread(self.perform, session)
        except Exception as e:
            raise ToolError(f"Failed to {self.action.replace('_', ' ')}: {e}") from e

        logger.debug(f"{self.action} on session {session.id}")
        return self.result({
            "sessionId": session.id,
            "action": self.action,
            "status": "success",
            "message": self.message,
            "newState": self.new_state,
        })


class ResumeTool(ExecutionControlTool):
    name = "resume"
    description = (
        "Resumes execution of a paused debug session.\n"
        "Execution continues until the next breakpoint or the program ends."
    )
    annotations = mutable("Resume")
    action = "resume"
    message = "Execution resumed"

    def check_state(self, session: DebugSession) -> None:
        if not session.is_paused:
            raise ToolError("Session is not paused")

    def perform(self, session: DebugSession) -> None:
        session.resume()


class PauseTool(ExecutionControlTool):
    name = "pause"
    description = (
        "Pauses execution of a running debug session.\n"
        "Use to break into the debugger at the current execution point.\n"
        "After pausing, you can inspect variables and step through code."
    )
    annotations = mutable("Pause")
    action = "pause"
    message = "Execution paused"
    new_state = "paused"

    def check_state(self, session: DebugSession) -> None:
        if session.is_terminated:
            raise ToolError("Session has terminated")
        if session.is_paused:
            raise ToolError("Session is already paused")

    def perform(self, session: DebugSession) -> None:
        session.pause()


class StepOverTool(ExecutionControlTool):
    name = "step_over"
    description = (
        "Steps over the current line, executing it without entering any function calls.\n"
        "Use to execute code line by line at the current level.\n"
        "After stepping, use get_debug_session_status to see the new state."
    )
    annotations = mutable("Step Over")
    action = "step_over"
    message = "Stepped over"

    def perform(self, session: DebugSession) -> None:
        session.step_over()


class StepIntoTool(ExecutionControlTool):
    name = "step_into"
    description = (
        "Steps into the function call on the current line.\n"
        "If the current line has a function call, execution enters that function.\n"
        "After stepping, use get_debug_session_status to see the new state."
    )
    annotations = mutable("Step Into")
    action = "step_into"
    message = "Stepped into"

    def perform(self, session: DebugSession) -> None:
        session.step_into()


class StepOutTool(ExecutionControlTool):
    name = "step_out"
    description = (
        "Steps out of the current method, returning to the caller.\n"
        "Use after stepping into a method to quickly return to the calling code."
    )
    annotations = mutable("Step Out")
    action = "step_out"
    message = "Stepped out"

    def perform(self, session: DebugSession) -> None:
        session.step_out()
