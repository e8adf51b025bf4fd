"""Interfaces of the IDE services the server drives.

The IDE integration layer implements these classes and hands them to the
server through :class:`IdeServices`. Nothing in this package implements a
debugger; tools only talk to these interfaces.

Stack frames, child variables and evaluation results are delivered
push-style: the IDE calls back into a container object, possibly from
several background threads, possibly in several batches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import Executor
from dataclasses import dataclass, field
from enum import Enum


class SessionState(str, Enum):
    """Debug session states as reported by the IDE."""
    RUNNING = "running"
    PAUSED = "paused"
    TERMINATED = "terminated"


class SuspendPolicy(str, Enum):
    """Which threads a breakpoint suspends."""
    ALL = "all"
    THREAD = "thread"
    NONE = "none"


@dataclass
class SourcePosition:
    """A location in a source file (0-based line, as the IDE reports it)."""
    path: str
    line: int


@dataclass
class ValuePresentation:
    """Rendered form of a debugger value."""
    value: str
    type: str | None = None
    has_children: bool = False


@dataclass
class RunConfiguration:
    """A run/debug configuration stored in the IDE."""
    name: str
    type_name: str
    type_id: str
    is_temporary: bool = False
    can_run: bool = True
    can_debug: bool = True
    folder: str | None = None
    description: str | None = None


# Callback interfaces implemented by the server and called by the IDE


class FrameContainer(ABC):
    """Receives stack frames from an execution stack."""

    @abstractmethod
    def add_stack_frames(self, frames: Sequence[StackFrame], last: bool) -> None:
        """Deliver a batch of frames; ``last`` marks the final batch."""

    @abstractmethod
    def error_occurred(self, message: str) -> None:
        """Report that frame computation failed."""

    @abstractmethod
    def is_obsolete(self) -> bool:
        """Return True once the server no longer wants frames."""


class ChildrenNode(ABC):
    """Receives the children of a frame or value."""

    @abstractmethod
    def add_children(self, children: Sequence[tuple[str, Value]], last: bool) -> None:
        """Deliver a batch of ``(name, value)`` pairs."""

    @abstractmethod
    def set_error_message(self, message: str) -> None:
        """Report that children could not be computed."""

    def too_many_children(self, remaining: int) -> None:
        """The IDE holds back ``remaining`` children until asked for more."""

    @abstractmethod
    def is_obsolete(self) -> bool:
        """Return True once the server no longer wants children."""


class EvaluationCallback(ABC):
    """Receives the outcome of an expression evaluation."""

    @abstractmethod
    def evaluated(self, value: Value) -> None: ...

    @abstractmethod
    def error_occurred(self, message: str) -> None: ...


# Debugger model


class Value(ABC):
    """A value in the debuggee (variable, field, evaluation result)."""

    @abstractmethod
    def compute_presentation(self, callback: Callable[[ValuePresentation], None]) -> None:
        """Render the value, calling ``callback`` once, possibly on another thread."""

    @abstractmethod
    def compute_children(self, node: ChildrenNode) -> None:
        """Push the value's children into ``node``."""


class StackFrame(ABC):
    """One frame of an execution stack."""

    @property
    @abstractmethod
    def source_position(self) -> SourcePosition | None: ...

    @property
    def presentation(self) -> str:
        """Display text of the frame, e.g. ``main:12, Main (com.example)``."""
        return str(self)

    @abstractmethod
    def compute_children(self, node: ChildrenNode) -> None:
        """Push the frame's visible variables into ``node``."""

    @abstractmethod
    def evaluate(self, expression: str, callback: EvaluationCallback) -> None:
        """Evaluate ``expression`` in this frame."""


class ExecutionStack(ABC):
    """The stack of one suspended thread."""

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @property
    @abstractmethod
    def top_frame(self) -> StackFrame | None: ...

    @abstractmethod
    def compute_stack_frames(self, first_frame_index: int, container: FrameContainer) -> None:
        """Push frames starting at ``first_frame_index`` into ``container``."""


class SuspendContext(ABC):
    """Snapshot of a paused session."""

    @property
    @abstractmethod
    def active_execution_stack(self) -> ExecutionStack | None: ...


class DebugSession(ABC):
    """A debugger attached to a running process."""

    @property
    @abstractmethod
    def id(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def state(self) -> SessionState: ...

    @property
    def is_paused(self) -> bool:
        return self.state == SessionState.PAUSED

    @property
    def is_terminated(self) -> bool:
        return self.state == SessionState.TERMINATED

    @property
    @abstractmethod
    def suspend_context(self) -> SuspendContext | None: ...

    @property
    @abstractmethod
    def current_stack_frame(self) -> StackFrame | None: ...

    @property
    def current_position(self) -> SourcePosition | None:
        frame = self.current_stack_frame
        return frame.source_position if frame else None

    @abstractmethod
    def set_current_stack_frame(self, stack: ExecutionStack, frame: StackFrame) -> None: ...

    # The following must run on the IDE UI thread.

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...

    @abstractmethod
    def step_over(self) -> None: ...

    @abstractmethod
    def step_into(self) -> None: ...

    @abstractmethod
    def step_out(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...


class DebuggerService(ABC):
    """Enumerates debug sessions."""

    @abstractmethod
    def sessions(self) -> list[DebugSession]: ...

    @abstractmethod
    def current_session(self) -> DebugSession | None:
        """The session the IDE currently focuses, if any."""


# Breakpoints and files


class SourceFile(ABC):
    """A file the IDE can place breakpoints in."""

    @property
    @abstractmethod
    def path(self) -> str: ...

    @property
    def name(self) -> str:
        return self.path.replace("\\", "/").rsplit("/", 1)[-1]


class FileResolver(ABC):
    """Maps paths to IDE files and validates breakpoint placement."""

    @abstractmethod
    def find_file(self, path: str) -> SourceFile | None: ...

    @abstractmethod
    def can_put_breakpoint_at(self, file: SourceFile, line: int) -> bool:
        """Whether a line breakpoint is legal at 0-based ``line``."""


class LineBreakpoint(ABC):
    """A line breakpoint; attributes are mutable on the UI thread."""

    id: str
    file_path: str
    line: int
    enabled: bool
    condition: str | None
    log_expression: str | None
    suspend_policy: SuspendPolicy
    temporary: bool


class BreakpointManager(ABC):
    """Creates, lists and removes line breakpoints."""

    @abstractmethod
    def line_breakpoints(self) -> list[LineBreakpoint]: ...

    def find_line_breakpoint(self, path: str, line: int) -> LineBreakpoint | None:
        for breakpoint in self.line_breakpoints():
            if breakpoint.file_path == path and breakpoint.line == line:
                return breakpoint
        return None

    @abstractmethod
    def add_line_breakpoint(self, file: SourceFile, line: int, temporary: bool = False) -> LineBreakpoint:
        """Create a breakpoint at 0-based ``line``; UI thread only."""

    @abstractmethod
    def remove_breakpoint(self, breakpoint: LineBreakpoint) -> None:
        """Remove a breakpoint; UI thread only."""


# Run configurations and processes


class RunProcess(ABC):
    """A process launched by the IDE, debugged or not."""

    @property
    @abstractmethod
    def id(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_terminated(self) -> bool: ...

    @abstractmethod
    def process_id(self) -> int | None:
        """OS process id, when the IDE knows it."""

    @abstractmethod
    def destroy(self) -> None: ...


class RunManager(ABC):
    """Run configurations and the processes launched from them."""

    @abstractmethod
    def configurations(self) -> list[RunConfiguration]: ...

    @abstractmethod
    def selected_configuration(self) -> RunConfiguration | None: ...

    def find_configuration(self, name: str) -> RunConfiguration | None:
        for configuration in self.configurations():
            if configuration.name == name:
                return configuration
        return None

    @abstractmethod
    def execute(self, configuration: RunConfiguration, debug: bool) -> None:
        """Launch ``configuration``; UI thread only."""

    @abstractmethod
    def running_processes(self) -> list[RunProcess]: ...


@dataclass
class IdeServices:
    """Everything the tools need from the IDE.

    ``ui_executor`` runs UI-thread-affine calls. When omitted, the server
    creates a single-worker executor and owns its lifetime.
    """
    debugger: DebuggerService
    breakpoints: BreakpointManager
    files: FileResolver
    runs: RunManager
    ui_executor: Executor | None = field(default=None)
