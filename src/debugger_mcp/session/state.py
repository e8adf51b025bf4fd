"""Serializable views of debugger objects returned by tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..ide import LineBreakpoint


@dataclass
class StackFrameInfo:
    """Stack frame information."""
    index: int
    file: str | None
    line: int | None
    class_name: str | None
    method_name: str | None
    is_current: bool
    is_library: bool
    presentation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "file": self.file,
            "line": self.line,
            "className": self.class_name,
            "methodName": self.method_name,
            "isCurrent": self.is_current,
            "isLibrary": self.is_library,
            "presentation": self.presentation,
        }


@dataclass
class VariableInfo:
    """Variable information."""
    name: str
    value: str
    type: str
    has_children: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "type": self.type,
            "hasChildren": self.has_children,
        }


@dataclass
class BreakpointInfo:
    """Line breakpoint as reported to clients (1-based line)."""
    id: str
    file: str
    line: int
    enabled: bool
    condition: str | None = None
    log_message: str | None = None
    suspend_policy: str = "all"
    temporary: bool = False

    @classmethod
    def from_breakpoint(cls, breakpoint: LineBreakpoint) -> BreakpointInfo:
        return cls(
            id=breakpoint.id,
            file=breakpoint.file_path,
            line=breakpoint.line + 1,
            enabled=breakpoint.enabled,
            condition=breakpoint.condition,
            log_message=breakpoint.log_expression,
            suspend_policy=breakpoint.suspend_policy.value,
            temporary=breakpoint.temporary,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "line",
            "file": self.file,
            "line": self.line,
            "enabled": self.enabled,
            "condition": self.condition,
            "logMessage": self.log_message,
            "suspendPolicy": self.suspend_policy,
            "temporary": self.temporary,
        }
