"""
Mock sessions.

A MockSession owns the expectation tree of one test. The tree is replaced
atomically around each dispatch; a response runs after its residual has been
committed, so it may register more expectations or make nested calls.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from .config import EngineConfig
from .core import EXPECT_NOTHING, ExpectSet, combine, finish, format_expect_set, show_with_loc
from .dispatch import select
from .errors import MockError
from .rules import Action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchRecord:
    """One successfully dispatched action."""
    action: str
    matched: str


class MockSession:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._expected: ExpectSet = EXPECT_NOTHING
        self._lock = threading.RLock()
        self._history: List[DispatchRecord] = []

    @property
    def expected(self) -> ExpectSet:
        return self._expected

    @property
    def history(self) -> List[DispatchRecord]:
        return list(self._history)

    def register(self, *fragments: ExpectSet) -> None:
        with self._lock:
            for fragment in fragments:
                self._expected = combine(self._expected, fragment)
            logger.debug("registered %d fragment(s)", len(fragments))

    def dispatch(self, action: Any) -> Any:
        """
        Verify one action and run the response of the expectation it
        satisfies. On error the tree is left as it was.
        """
        with self._lock:
            try:
                chosen = select(self._expected, action, self.config.max_closest_matches)
            except MockError as exc:
                logger.info("dispatch failed [%s]: %s", exc.code, action)
                raise
            self._expected = chosen.residual
            self._history.append(
                DispatchRecord(
                    action=str(action),
                    matched=show_with_loc(chosen.loc, chosen.description),
                )
            )
            return chosen.response()

    def describe(self) -> str:
        with self._lock:
            return format_expect_set(self._expected, "", self.config.report_indent)

    def finish(self) -> None:
        with self._lock:
            try:
                finish(self._expected, self.config.report_indent)
            except MockError:
                logger.warning("session finished with unmet expectations")
                raise


class Mock:
    """
    Proxy whose method calls are verified by a session.

    ``mock.read("a")`` dispatches ``Action("read", ("a",))``.
    """

    def __init__(self, session: MockSession, name: str = "mock") -> None:
        self._session = session
        self._name = name

    def __getattr__(self, method: str):
        if method.startswith("__"):
            raise AttributeError(method)

        def call(*args: Any, **kwargs: Any) -> Any:
            return self._session.dispatch(Action(method, args, kwargs))

        call.__name__ = method
        return call

    def __repr__(self) -> str:
        return f"<Mock {self._name}>"


@contextmanager
def run_mock(config: Optional[EngineConfig] = None) -> Iterator[MockSession]:
    """
    Run a block against a fresh session and check teardown when it exits
    normally. Exceptions from the block propagate without the check.
    """
    session = MockSession(config)
    yield session
    session.finish()
