"""Tool abstraction shared by every debugger operation."""

from __future__ import annotations

import asyncio
import functools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from mcp.types import CallToolResult, Tool, ToolAnnotations

from ..errors import ToolError
from ..ide import DebugSession, IdeServices, RunProcess
from ..protocol.messages import error_result, json_result
from ..session.resolver import SessionResolver

logger = logging.getLogger(__name__)

R = TypeVar("R")

SESSION_ID = "session_id"


@dataclass
class ToolContext:
    """Per-call access to the IDE."""
    ide: IdeServices
    resolver: SessionResolver

    def resolve_session(self, arguments: dict[str, Any]) -> DebugSession:
        return self.resolver.resolve(optional_str(arguments, SESSION_ID))

    def resolve_run_session(self, arguments: dict[str, Any]) -> RunProcess:
        return self.resolver.resolve_run(optional_str(arguments, SESSION_ID))

    async def on_ui_thread(self, fn: Callable[..., R], *args: Any) -> R:
        """Run ``fn`` on the IDE UI thread and wait for it without blocking the loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.ide.ui_executor, functools.partial(fn, *args))


class McpTool(ABC):
    """A named, schema-described debugger operation.

    Subclasses set ``name``, ``description`` and ``input_schema`` and
    implement ``execute``. ``invoke`` never raises.
    """

    name: str = ""
    description: str = ""
    input_schema: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
    annotations: ToolAnnotations | None = None

    def definition(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
            annotations=self.annotations,
        )

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    async def invoke(self, arguments: dict[str, Any] | None, context: ToolContext) -> CallToolResult:
        arguments = arguments or {}
        for key in self.required:
            if arguments.get(key) is None:
                return error_result(f"Missing required parameter: {key}")

        try:
            return await self.execute(arguments, context)
        except ToolError as e:
            return error_result(str(e))
        except Exception as e:
            logger.exception(f"Tool {self.name} failed")
            return error_result(f"Failed to execute {self.name}: {e}")

    @abstractmethod
    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> CallToolResult:
        """Perform the operation; may raise ToolError for client-facing failures."""

    @staticmethod
    def result(payload: dict[str, Any]) -> CallToolResult:
        return json_result(payload)


# Schema helpers


def object_schema(
    properties: dict[str, dict[str, Any]],
    required: list[str] | None = None,
    additional_properties: bool | None = None,
) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "required": required or [],
    }
    if additional_properties is not None:
        schema["additionalProperties"] = additional_properties
    return schema


def session_id_property() -> dict[str, dict[str, Any]]:
    return {
        SESSION_ID: {
            "type": "string",
            "description": "Debug session ID. Uses the current session if omitted.",
        }
    }


def frame_index_property(description: str = "Stack frame index (0 = current frame)") -> dict[str, Any]:
    return {"type": "integer", "description": description, "default": 0, "minimum": 0}


def read_only(title: str) -> ToolAnnotations:
    return ToolAnnotations(title=title, readOnlyHint=True, destructiveHint=False, openWorldHint=False)


def mutable(title: str, destructive: bool = False) -> ToolAnnotations:
    return ToolAnnotations(title=title, readOnlyHint=False, destructiveHint=destructive, openWorldHint=False)


# Argument helpers


def optional_str(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ToolError(f"Invalid parameter {key}: expected a string")
    return str(value)


def optional_int(arguments: dict[str, Any], key: str, default: int | None = None) -> int | None:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ToolError(f"Invalid parameter {key}: expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ToolError(f"Invalid parameter {key}: expected an integer")


def optional_bool(arguments: dict[str, Any], key: str, default: bool | None) -> bool | None:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ToolError(f"Invalid parameter {key}: expected a boolean")


def require_paused(session: DebugSession, action: str) -> None:
    if not session.is_paused:
        raise ToolError(f"Session must be paused to {action}")
