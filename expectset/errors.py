"""
Errors raised by the expectation engine.

Every error is terminal for the operation that raised it (one call, or the
teardown check) but leaves the expectation tree untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MockError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class NoMatchError(MockError):
    """The action matches the method or shape of no live expectation."""

    def __init__(self, action: str):
        super().__init__(
            code="NO_MATCH",
            message=f"Unexpected action: {action}",
            details={"action": action},
        )


class PartialMatchError(MockError):
    """The action matches some method but no expectation's arguments."""

    def __init__(self, action: str, closest: List[str]):
        super().__init__(
            code="PARTIAL_MATCH",
            message=(
                f"Wrong arguments: {action}\n\nClosest matches:\n - "
                + "\n - ".join(closest)
            ),
            details={"action": action, "closest": list(closest)},
        )


class AmbiguousMatchError(MockError):
    """Two or more expectations of the same top priority match fully."""

    def __init__(self, action: str, matches: List[str]):
        super().__init__(
            code="AMBIGUOUS_MATCH",
            message=(
                f"Ambiguous matches for action: {action}\nPossible matches:\n - "
                + "\n - ".join(matches)
            ),
            details={"action": action, "matches": list(matches)},
        )


class UnmetExpectationsError(MockError):
    """Mandatory expectations were left at teardown."""

    def __init__(self, report: str):
        super().__init__(
            code="UNMET_EXPECTATIONS",
            message=f"Unmet expectations:\n{report}",
            details={"report": report},
        )


class KitError(MockError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="INVALID_KIT", message=message, details=details)


class SessionNotFoundError(MockError):
    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_NOT_FOUND",
            message=f"Unknown session_id '{session_id}'.",
            details={"session_id": session_id},
        )
