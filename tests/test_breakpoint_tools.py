"""Tests for breakpoint tools."""

import pytest

from debugger_mcp.ide import SuspendPolicy
from debugger_mcp.tools.breakpoints import ListBreakpointsTool, RemoveBreakpointTool, SetBreakpointTool
from fakes import MAIN_FILE, UI_THREAD_PREFIX, error_text, payload


class TestSetBreakpoint:
    """Tests for set_breakpoint."""

    @pytest.mark.asyncio
    async def test_sets_breakpoint(self, context, ide):
        """Test a new breakpoint is created at the 0-based line on the UI thread."""
        result = await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 12}, context)

        data = payload(result)
        assert data["status"] == "set"
        assert data["verified"] is True
        assert data["line"] == 12
        assert data["message"] == "Breakpoint set at Main.java:12"
        breakpoint = ide.breakpoints.breakpoints[0]
        assert breakpoint.line == 11
        assert data["breakpointId"] == breakpoint.id
        assert ide.breakpoints.threads[0].startswith(UI_THREAD_PREFIX)

    @pytest.mark.asyncio
    async def test_applies_properties(self, context, ide):
        """Test condition, log message, policy and enabled state are applied."""
        await SetBreakpointTool().invoke({
            "file_path": MAIN_FILE,
            "line": 20,
            "condition": "count > 2",
            "log_message": "count={count}",
            "suspend_policy": "thread",
            "enabled": False,
            "temporary": True,
        }, context)

        breakpoint = ide.breakpoints.breakpoints[0]
        assert breakpoint.condition == "count > 2"
        assert breakpoint.log_expression == "count={count}"
        assert breakpoint.suspend_policy == SuspendPolicy.THREAD
        assert breakpoint.enabled is False
        assert breakpoint.temporary is True

    @pytest.mark.asyncio
    async def test_existing_location_updates(self, context, ide):
        """Test setting twice at one location updates instead of duplicating."""
        tool = SetBreakpointTool()
        first = payload(await tool.invoke({"file_path": MAIN_FILE, "line": 12}, context))
        second = payload(await tool.invoke(
            {"file_path": MAIN_FILE, "line": 12, "condition": "x"}, context
        ))

        assert second["status"] == "updated"
        assert second["breakpointId"] == first["breakpointId"]
        assert len(ide.breakpoints.breakpoints) == 1
        assert ide.breakpoints.breakpoints[0].condition == "x"

    @pytest.mark.asyncio
    async def test_update_temporary(self, context, ide):
        """Test an update changes temporary only when it is passed."""
        tool = SetBreakpointTool()
        await tool.invoke({"file_path": MAIN_FILE, "line": 12}, context)
        breakpoint = ide.breakpoints.breakpoints[0]
        assert breakpoint.temporary is False

        await tool.invoke({"file_path": MAIN_FILE, "line": 12, "temporary": True}, context)
        assert breakpoint.temporary is True

        await tool.invoke({"file_path": MAIN_FILE, "line": 12, "condition": "y"}, context)
        assert breakpoint.temporary is True

        await tool.invoke({"file_path": MAIN_FILE, "line": 12, "temporary": False}, context)
        assert breakpoint.temporary is False
        assert len(ide.breakpoints.breakpoints) == 1

    @pytest.mark.asyncio
    async def test_line_zero_rejected(self, context, ide):
        """Test line 0 is never a valid location."""
        result = await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 0}, context)

        assert error_text(result) == (
            f"Cannot set breakpoint at {MAIN_FILE}:0 (not a valid breakpoint location)"
        )
        assert ide.breakpoints.breakpoints == []

    @pytest.mark.asyncio
    async def test_invalid_location(self, context, ide):
        """Test a line the IDE refuses is rejected."""
        result = await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 5}, context)

        assert "not a valid breakpoint location" in error_text(result)
        assert ide.breakpoints.breakpoints == []

    @pytest.mark.asyncio
    async def test_unknown_file(self, context):
        """Test a path the IDE cannot resolve."""
        result = await SetBreakpointTool().invoke({"file_path": "/nope.java", "line": 3}, context)

        assert error_text(result) == "File not found: /nope.java"

    @pytest.mark.asyncio
    async def test_missing_line(self, context, ide):
        """Test the required line argument."""
        result = await SetBreakpointTool().invoke({"file_path": MAIN_FILE}, context)

        assert error_text(result) == "Missing required parameter: line"
        assert ide.breakpoints.breakpoints == []

    @pytest.mark.asyncio
    async def test_invalid_suspend_policy(self, context, ide):
        """Test an unknown suspend policy is rejected before any change."""
        result = await SetBreakpointTool().invoke(
            {"file_path": MAIN_FILE, "line": 12, "suspend_policy": "process"}, context
        )

        assert "Invalid suspend_policy: process" in error_text(result)
        assert ide.breakpoints.breakpoints == []


class TestListBreakpoints:
    """Tests for list_breakpoints."""

    @pytest.mark.asyncio
    async def test_lists_with_one_based_lines(self, context, ide):
        """Test breakpoints are reported with 1-based lines."""
        await SetBreakpointTool().invoke(
            {"file_path": MAIN_FILE, "line": 12, "condition": "x > 1"}, context
        )

        data = payload(await ListBreakpointsTool().invoke({}, context))

        assert data["totalCount"] == 1
        assert data["breakpoints"][0] == {
            "id": "bp-1",
            "type": "line",
            "file": MAIN_FILE,
            "line": 12,
            "enabled": True,
            "condition": "x > 1",
            "logMessage": None,
            "suspendPolicy": "all",
            "temporary": False,
        }

    @pytest.mark.asyncio
    async def test_file_filter(self, context):
        """Test filtering by file path."""
        await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 12}, context)

        data = payload(await ListBreakpointsTool().invoke({"file_path": "/other.java"}, context))

        assert data == {"breakpoints": [], "totalCount": 0}


class TestRemoveBreakpoint:
    """Tests for remove_breakpoint."""

    @pytest.mark.asyncio
    async def test_remove_by_id(self, context, ide):
        """Test removal by breakpoint id."""
        created = payload(await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 12}, context))

        data = payload(await RemoveBreakpointTool().invoke({"breakpoint_id": created["breakpointId"]}, context))

        assert data["status"] == "removed"
        assert data["line"] == 12
        assert ide.breakpoints.breakpoints == []

    @pytest.mark.asyncio
    async def test_remove_by_location(self, context, ide):
        """Test removal by file and 1-based line."""
        await SetBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 12}, context)

        result = await RemoveBreakpointTool().invoke({"file_path": MAIN_FILE, "line": 12}, context)

        assert payload(result)["status"] == "removed"
        assert ide.breakpoints.breakpoints == []

    @pytest.mark.asyncio
    async def test_unknown_id(self, context):
        """Test removing a breakpoint that does not exist."""
        result = await RemoveBreakpointTool().invoke({"breakpoint_id": "bp-99"}, context)

        assert error_text(result) == "Breakpoint not found: bp-99"

    @pytest.mark.asyncio
    async def test_requires_some_identifier(self, context):
        """Test calling without id or location."""
        result = await RemoveBreakpointTool().invoke({"file_path": MAIN_FILE}, context)

        assert error_text(result) == "Provide breakpoint_id, or file_path and line"
