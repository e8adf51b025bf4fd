"""Pytest fixtures for debugger-mcp tests."""

import os
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from debugger_mcp.ide import IdeServices  # noqa: E402
from debugger_mcp.session.resolver import SessionResolver  # noqa: E402
from debugger_mcp.tools.base import ToolContext  # noqa: E402
from fakes import (  # noqa: E402
    MAIN_FILE,
    UI_THREAD_PREFIX,
    FakeBreakpointManager,
    FakeDebugger,
    FakeFileResolver,
    FakeFrame,
    FakeRunManager,
    FakeSession,
    FakeStack,
    FakeValue,
    app_configuration,
)


@pytest.fixture
def ui_executor():
    """Single worker standing in for the IDE UI thread."""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=UI_THREAD_PREFIX)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def sample_frames():
    """Two frames: main() in user code and a library frame below it."""
    user = FakeValue("User{name=ada}", type="com.example.User", children=[
        ("name", FakeValue('"ada"', type="String")),
        ("address", FakeValue("Address", type="com.example.Address", children=[
            ("city", FakeValue('"London"', type="String")),
            ("zip", FakeValue('"N1"', type="String")),
        ])),
    ])
    main = FakeFrame(
        "main:12, Main (com.example)",
        path=MAIN_FILE,
        line=11,
        variables=[("count", FakeValue("3")), ("user", user)],
        results={"count + 1": FakeValue("4")},
        errors={"missing": "Cannot find local variable 'missing'"},
    )
    library = FakeFrame(
        "invoke0:-1, NativeMethodAccessorImpl (jdk.internal.reflect)",
        path="/usr/lib/jvm/jdk/src.zip!/NativeMethodAccessorImpl.java",
        line=0,
        variables=[("this", FakeValue("Accessor", type="Object"))],
    )
    return [main, library]


@pytest.fixture
def paused_session(sample_frames):
    return FakeSession("session-1", name="Main", stack=FakeStack(sample_frames))


@pytest.fixture
def ide(paused_session, ui_executor):
    """IDE with one paused session, one source file and two run configurations."""
    return IdeServices(
        debugger=FakeDebugger([paused_session]),
        breakpoints=FakeBreakpointManager(),
        files=FakeFileResolver({MAIN_FILE: set(range(0, 40)) - {4}}),
        runs=FakeRunManager(
            configurations=[app_configuration("App"), app_configuration("Docs", can_debug=False)],
        ),
        ui_executor=ui_executor,
    )


@pytest.fixture
def context(ide):
    return ToolContext(ide=ide, resolver=SessionResolver(ide.debugger, ide.runs))
