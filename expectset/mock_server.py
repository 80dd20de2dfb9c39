"""
Mock server (in-memory).

Wraps MockSession with session management so that calls made out of process
can be verified against a kit.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import EngineConfig
from .errors import SessionNotFoundError
from .kit import Kit, kit_steps
from .rules import Action
from .session import DispatchRecord, MockSession

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    session_id: str
    session: MockSession
    source: Optional[str] = None


class MockServer:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config = config or EngineConfig()
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def declare_session(self, kit: Kit) -> Tuple[str, List[str]]:
        """
        Start a session expecting everything in ``kit``.

        Returns:
            The new session id and the descriptions of the kit's steps
        """
        session = MockSession(self._config)
        session.register(kit.expectations)
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = SessionState(session_id, session, kit.source)
        steps = kit_steps(kit)
        logger.info("declared session %s with %d expectation(s)", session_id, len(steps))
        return session_id, steps

    def call(
        self,
        session_id: str,
        method: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        state = self._get(session_id)
        return state.session.dispatch(Action(method, tuple(args), dict(kwargs or {})))

    def describe(self, session_id: str) -> str:
        return self._get(session_id).session.describe()

    def history(self, session_id: str) -> List[DispatchRecord]:
        return self._get(session_id).session.history

    def finish(self, session_id: str) -> None:
        """Teardown check. The session is closed whether or not it passes."""
        state = self._get(session_id)
        try:
            state.session.finish()
        finally:
            with self._lock:
                self._sessions.pop(session_id, None)
            logger.info("finished session %s", session_id)

    def _get(self, session_id: str) -> SessionState:
        with self._lock:
            state = self._sessions.get(session_id)
        if state is None:
            raise SessionNotFoundError(session_id)
        return state
