"""Locate the debug session or run process a tool call refers to."""

from __future__ import annotations

import logging

from ..ide import DebuggerService, DebugSession, RunManager, RunProcess
from ..errors import ToolError

logger = logging.getLogger(__name__)


class SessionNotFoundError(ToolError):
    """An explicit session id matched nothing."""


class NoActiveSessionError(ToolError):
    """No session id was given and none exists."""


class SessionResolver:
    """Resolves optional session ids against the IDE.

    With an id, the matching session or an error. Without one: an error when
    nothing runs, the only session when there is one, and the IDE's current
    session when there are several.
    """

    def __init__(self, debugger: DebuggerService, runs: RunManager):
        self._debugger = debugger
        self._runs = runs

    def resolve(self, session_id: str | None = None) -> DebugSession:
        sessions = self._debugger.sessions()

        if session_id is not None:
            for session in sessions:
                if session.id == session_id:
                    return session
            raise SessionNotFoundError(f"Session not found: {session_id}")

        if not sessions:
            raise NoActiveSessionError("No active debug session")
        if len(sessions) == 1:
            return sessions[0]

        current = self._debugger.current_session()
        if current is None:
            logger.debug(f"{len(sessions)} sessions and no current one; using the first")
            return sessions[0]
        return current

    def resolve_run(self, session_id: str | None = None) -> RunProcess:
        processes = self._runs.running_processes()

        if session_id is not None:
            for process in processes:
                pid = process.process_id()
                if process.id == session_id or (pid is not None and str(pid) == session_id):
                    return process
            raise SessionNotFoundError(f"Run session not found: {session_id}")

        if not processes:
            raise NoActiveSessionError("No active run session")
        if len(processes) == 1:
            return processes[0]

        for process in processes:
            if not process.is_terminated:
                return process
        return processes[0]
