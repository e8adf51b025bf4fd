"""Stack frame, variable and evaluation queries built on ResultCollector."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import replace

from ..ide import (
    ChildrenNode,
    EvaluationCallback,
    ExecutionStack,
    FrameContainer,
    StackFrame,
    Value,
    ValuePresentation,
)
from .collector import CollectedResult, ResultCollector
from .state import StackFrameInfo, VariableInfo

logger = logging.getLogger(__name__)

FRAMES_TIMEOUT = 3.0
VARIABLES_TIMEOUT = 5.0
EVALUATION_TIMEOUT = 5.0

MAX_PRESENTATION_LENGTH = 150

LIBRARY_PATH_MARKERS = (
    "/.m2/",
    "/.gradle/",
    "/jdk/",
    "/jre/",
    ".jar!/",
    "/site-packages/",
    "/dist-packages/",
    "/node_modules/",
    "/lib/python",
)

# "main:12, Main (com.example)" or "run(), Worker"
_FRAME_PRESENTATION = re.compile(
    r"^(?P<method>[^:(,\s]+)(?:\(\))?(?::-?\d+)?,\s*(?P<cls>[\w$.<>]+)(?:\s+\((?P<package>[\w.]+)\))?"
)


class FrameCollector(FrameContainer):
    """FrameContainer that feeds a ResultCollector."""

    def __init__(self, collector: ResultCollector[StackFrame]):
        self._collector = collector

    def add_stack_frames(self, frames: Sequence[StackFrame], last: bool) -> None:
        self._collector.add_batch(frames, last)

    def error_occurred(self, message: str) -> None:
        self._collector.fail(message)

    def is_obsolete(self) -> bool:
        return self._collector.is_obsolete()


class ChildrenCollector(ChildrenNode):
    """ChildrenNode that renders each child before handing it to the collector.

    Presentation is computed asynchronously per child, so every batch is
    announced with ``expect`` and each rendered child arrives via ``deliver``.
    """

    def __init__(self, collector: ResultCollector[VariableInfo]):
        self._collector = collector
        self.remaining: int = 0

    def add_children(self, children: Sequence[tuple[str, Value]], last: bool) -> None:
        self._collector.expect(len(children), last)
        for name, value in children:
            if self._collector.is_obsolete():
                break
            value.compute_presentation(self._presentation_callback(name))

    def set_error_message(self, message: str) -> None:
        self._collector.fail(message)

    def too_many_children(self, remaining: int) -> None:
        # Delivery ends here; the IDE holds back the rest.
        self.remaining = remaining
        self._collector.expect(0, last=True)

    def is_obsolete(self) -> bool:
        return self._collector.is_obsolete()

    def _presentation_callback(self, name: str):
        def deliver(presentation: ValuePresentation) -> None:
            self._collector.deliver(variable_info(name, presentation))
        return deliver


class ChildValueCollector(ChildrenNode):
    """ChildrenNode that keeps the raw ``(name, value)`` pairs."""

    def __init__(self, collector: ResultCollector[tuple[str, Value]]):
        self._collector = collector

    def add_children(self, children: Sequence[tuple[str, Value]], last: bool) -> None:
        self._collector.add_batch(children, last)

    def set_error_message(self, message: str) -> None:
        self._collector.fail(message)

    def too_many_children(self, remaining: int) -> None:
        self._collector.add_batch([], last=True)

    def is_obsolete(self) -> bool:
        return self._collector.is_obsolete()


class EvaluationCollector(EvaluationCallback):
    """EvaluationCallback resolving a one-item collector."""

    def __init__(self, collector: ResultCollector[Value]):
        self._collector = collector

    def evaluated(self, value: Value) -> None:
        self._collector.add_batch([value], last=True)

    def error_occurred(self, message: str) -> None:
        self._collector.fail(message)


def variable_info(name: str, presentation: ValuePresentation) -> VariableInfo:
    return VariableInfo(
        name=name,
        value=presentation.value,
        type=presentation.type or "unknown",
        has_children=presentation.has_children,
    )


async def collect_stack_frames(stack: ExecutionStack, max_frames: int) -> list[StackFrame]:
    """Collect up to ``max_frames`` frames, degrading to a partial list."""
    collector: ResultCollector[StackFrame] = ResultCollector(limit=max_frames)
    stack.compute_stack_frames(0, FrameCollector(collector))
    result = await collector.wait(FRAMES_TIMEOUT)
    _log_degraded("stack frames", result)
    return result.items


async def collect_variables(
    owner: StackFrame | Value, limit: int | None = None
) -> CollectedResult[VariableInfo]:
    """Collect rendered children of a frame or value."""
    collector: ResultCollector[VariableInfo] = ResultCollector(limit=limit)
    node = ChildrenCollector(collector)
    owner.compute_children(node)
    result = await collector.wait(VARIABLES_TIMEOUT)
    _log_degraded("variables", result)
    return replace(result, remaining=node.remaining)


async def collect_child_values(owner: StackFrame | Value) -> list[tuple[str, Value]]:
    """Collect unrendered children, used to walk a variable path."""
    collector: ResultCollector[tuple[str, Value]] = ResultCollector()
    owner.compute_children(ChildValueCollector(collector))
    result = await collector.wait(VARIABLES_TIMEOUT)
    _log_degraded("child values", result)
    return result.items


async def compute_presentation(value: Value) -> ValuePresentation | None:
    """Render one value; None when the IDE does not answer in time."""
    collector: ResultCollector[ValuePresentation] = ResultCollector(limit=1)
    value.compute_presentation(lambda presentation: collector.add_batch([presentation], last=True))
    result = await collector.wait(VARIABLES_TIMEOUT)
    return result.items[0] if result.items else None


async def evaluate_expression(frame: StackFrame, expression: str) -> CollectedResult[Value]:
    collector: ResultCollector[Value] = ResultCollector(limit=1)
    frame.evaluate(expression, EvaluationCollector(collector))
    return await collector.wait(EVALUATION_TIMEOUT)


def _log_degraded(what: str, result: CollectedResult) -> None:
    if result.timed_out:
        logger.warning(f"Timed out collecting {what}; returning {len(result.items)} items")
    elif result.error_message:
        logger.info(f"Partial {what} ({len(result.items)} items): {result.error_message}")


def split_frame_presentation(presentation: str) -> tuple[str | None, str | None]:
    """Return ``(class_name, method_name)`` parsed from a frame's display text."""
    match = _FRAME_PRESENTATION.match(presentation.strip())
    if not match:
        return None, None
    class_name = match.group("cls")
    if match.group("package"):
        class_name = f"{match.group('package')}.{class_name}"
    return class_name, match.group("method")


def is_library_path(path: str | None) -> bool:
    if not path:
        return False
    normalized = path.replace("\\", "/")
    return any(marker in normalized for marker in LIBRARY_PATH_MARKERS)


def frame_info(frame: StackFrame, index: int, is_current: bool | None = None) -> StackFrameInfo:
    position = frame.source_position
    path = position.path if position else None
    presentation = frame.presentation
    class_name, method_name = split_frame_presentation(presentation)
    return StackFrameInfo(
        index=index,
        file=path,
        line=position.line + 1 if position else None,
        class_name=class_name,
        method_name=method_name,
        is_current=index == 0 if is_current is None else is_current,
        is_library=is_library_path(path),
        presentation=presentation[:MAX_PRESENTATION_LENGTH],
    )
