"""Session resolution and debugger result collection."""

from .collector import CollectedResult, ResultCollector
from .resolver import NoActiveSessionError, SessionNotFoundError, SessionResolver
from .state import BreakpointInfo, StackFrameInfo, VariableInfo

__all__ = [
    "BreakpointInfo",
    "CollectedResult",
    "NoActiveSessionError",
    "ResultCollector",
    "SessionNotFoundError",
    "SessionResolver",
    "StackFrameInfo",
    "VariableInfo",
]
