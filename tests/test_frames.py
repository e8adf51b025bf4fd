"""Tests for frame, variable and evaluation collection."""

import pytest

from debugger_mcp.session import frames
from debugger_mcp.session.frames import (
    collect_child_values,
    collect_stack_frames,
    collect_variables,
    compute_presentation,
    evaluate_expression,
    frame_info,
    is_library_path,
    split_frame_presentation,
)
from fakes import NEVER, THREAD, FakeFrame, FakeStack, FakeValue


class TestSplitFramePresentation:
    """Tests for parsing frame display text."""

    def test_method_line_class_package(self):
        """Test the common 'method:line, Class (package)' form."""
        assert split_frame_presentation("main:12, Main (com.example)") == ("com.example.Main", "main")

    def test_without_package(self):
        """Test frames of classes in the default package."""
        assert split_frame_presentation("run(), Worker") == ("Worker", "run")

    def test_negative_line(self):
        """Test native frames reported with line -1."""
        assert split_frame_presentation(
            "invoke0:-1, NativeMethodAccessorImpl (jdk.internal.reflect)"
        ) == ("jdk.internal.reflect.NativeMethodAccessorImpl", "invoke0")

    def test_unparseable(self):
        """Test free-form text yields no names."""
        assert split_frame_presentation("<frame not available>") == (None, None)


class TestIsLibraryPath:
    """Tests for library path detection."""

    @pytest.mark.parametrize("path", [
        "/home/u/.m2/repository/junit/junit.jar!/org/junit/Assert.class",
        "C:\\Users\\u\\.gradle\\caches\\lib.jar!/Foo.class",
        "/usr/lib/python3/site-packages/requests/api.py",
    ])
    def test_library_paths(self, path):
        """Test dependency caches and installed packages are libraries."""
        assert is_library_path(path)

    def test_project_path(self):
        """Test project sources are not libraries."""
        assert not is_library_path("/project/src/com/example/Main.java")

    def test_missing_path(self):
        """Test frames without a file are not libraries."""
        assert not is_library_path(None)


class TestFrameInfo:
    """Tests for frame_info."""

    def test_user_frame(self, sample_frames):
        """Test position is reported 1-based with parsed names."""
        info = frame_info(sample_frames[0], 0).to_dict()

        assert info["line"] == 12
        assert info["file"].endswith("Main.java")
        assert info["className"] == "com.example.Main"
        assert info["methodName"] == "main"
        assert info["isCurrent"] is True
        assert info["isLibrary"] is False

    def test_library_frame_not_current(self, sample_frames):
        """Test frames below the top are not current."""
        info = frame_info(sample_frames[1], 1).to_dict()

        assert info["isCurrent"] is False
        assert info["isLibrary"] is True

    def test_frame_without_position(self):
        """Test frames without source have no file or line."""
        info = frame_info(FakeFrame("<native>"), 3)

        assert info.file is None
        assert info.line is None

    def test_presentation_truncated(self):
        """Test long display text is cut to the maximum length."""
        info = frame_info(FakeFrame("x" * 500), 0)

        assert len(info.presentation) == frames.MAX_PRESENTATION_LENGTH


class TestCollectStackFrames:
    """Tests for collect_stack_frames."""

    @pytest.mark.asyncio
    async def test_collects_all_batches(self, sample_frames):
        """Test frames delivered one per batch are all collected in order."""
        stack = FakeStack(sample_frames, batch_size=1)

        collected = await collect_stack_frames(stack, 50)

        assert collected == sample_frames

    @pytest.mark.asyncio
    async def test_respects_max_frames(self, sample_frames):
        """Test the cap stops collection early."""
        stack = FakeStack(sample_frames * 5, batch_size=1)

        collected = await collect_stack_frames(stack, 3)

        assert len(collected) == 3

    @pytest.mark.asyncio
    async def test_frames_from_background_thread(self, sample_frames):
        """Test frames pushed from another thread are collected."""
        stack = FakeStack(sample_frames, mode=THREAD)

        collected = await collect_stack_frames(stack, 50)

        assert collected == sample_frames

    @pytest.mark.asyncio
    async def test_error_returns_partial(self, sample_frames):
        """Test an error after the first frame keeps that frame."""
        stack = FakeStack(sample_frames, error="stack unavailable")

        collected = await collect_stack_frames(stack, 50)

        assert collected == sample_frames[:1]

    @pytest.mark.asyncio
    async def test_silent_stack_times_out_empty(self, sample_frames, monkeypatch):
        """Test a stack that never answers yields no frames."""
        monkeypatch.setattr(frames, "FRAMES_TIMEOUT", 0.05)
        stack = FakeStack(sample_frames, mode=NEVER)

        assert await collect_stack_frames(stack, 50) == []


class TestCollectVariables:
    """Tests for variable collection."""

    @pytest.mark.asyncio
    async def test_frame_variables(self, sample_frames):
        """Test children are rendered with their presentations."""
        result = await collect_variables(sample_frames[0])

        assert result.complete
        assert [v.to_dict() for v in result.items] == [
            {"name": "count", "value": "3", "type": "int", "hasChildren": False},
            {"name": "user", "value": "User{name=ada}", "type": "com.example.User", "hasChildren": True},
        ]

    @pytest.mark.asyncio
    async def test_presentations_from_background_threads(self):
        """Test rendering on other threads completes the collection."""
        frame = FakeFrame("f", variables=[
            (f"v{i}", FakeValue(str(i), mode=THREAD)) for i in range(10)
        ])

        result = await collect_variables(frame)

        assert result.complete
        assert sorted(v.name for v in result.items) == [f"v{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_error_returns_partial(self, sample_frames):
        """Test a producer error keeps the variables rendered so far."""
        frame = sample_frames[0]
        frame.children_error = "Frame is not available"

        result = await collect_variables(frame)

        assert [v.name for v in result.items] == ["count"]
        assert result.error_message == "Frame is not available"

    @pytest.mark.asyncio
    async def test_unrendered_child_times_out(self, monkeypatch):
        """Test a child whose presentation never arrives is left out."""
        monkeypatch.setattr(frames, "VARIABLES_TIMEOUT", 0.05)
        frame = FakeFrame("f", variables=[("a", FakeValue("1")), ("b", FakeValue("2", mode=NEVER))])

        result = await collect_variables(frame)

        assert result.timed_out
        assert [v.name for v in result.items] == ["a"]

    @pytest.mark.asyncio
    async def test_held_back_children_complete(self, monkeypatch):
        """Test a collection that stops after its first page resolves with the held back count."""
        monkeypatch.setattr(frames, "VARIABLES_TIMEOUT", 0.5)
        items = FakeValue("ArrayList", type="java.util.ArrayList", held_back=97, children=[
            (f"[{i}]", FakeValue(str(i))) for i in range(3)
        ])

        result = await collect_variables(items)

        assert result.complete
        assert not result.timed_out
        assert result.remaining == 97
        assert [v.name for v in result.items] == ["[0]", "[1]", "[2]"]

    @pytest.mark.asyncio
    async def test_held_back_child_values(self):
        """Test walking into a paged collection sees its first page."""
        items = FakeValue("ArrayList", held_back=5, children=[("[0]", FakeValue("0"))])

        children = await collect_child_values(items)

        assert [name for name, _ in children] == ["[0]"]

    @pytest.mark.asyncio
    async def test_child_values_unrendered(self, sample_frames):
        """Test raw children keep their names and value objects."""
        children = await collect_child_values(sample_frames[0])

        assert [name for name, _ in children] == ["count", "user"]
        assert isinstance(children[1][1], FakeValue)


class TestEvaluateExpression:
    """Tests for expression evaluation."""

    @pytest.mark.asyncio
    async def test_success(self, sample_frames):
        """Test an evaluated value is returned."""
        outcome = await evaluate_expression(sample_frames[0], "count + 1")

        assert len(outcome.items) == 1
        presentation = await compute_presentation(outcome.items[0])
        assert presentation.value == "4"

    @pytest.mark.asyncio
    async def test_error(self, sample_frames):
        """Test evaluation errors carry the IDE's message."""
        outcome = await evaluate_expression(sample_frames[0], "missing")

        assert outcome.items == []
        assert outcome.error_message == "Cannot find local variable 'missing'"

    @pytest.mark.asyncio
    async def test_hanging_evaluation(self, sample_frames, monkeypatch):
        """Test an evaluation that never answers times out."""
        monkeypatch.setattr(frames, "EVALUATION_TIMEOUT", 0.05)

        outcome = await evaluate_expression(sample_frames[0], "while(true);")

        assert outcome.timed_out
        assert outcome.items == []
