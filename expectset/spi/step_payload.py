"""
SPI interface for step payloads.

The engine never looks inside a payload; it only asks it to describe itself
and to match an observed action.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union


@dataclass(frozen=True)
class NoMatch:
    """Same method and shape, but ``distance`` arguments were rejected."""

    distance: int


@dataclass(frozen=True)
class Match:
    """Full match. ``response`` runs the committed response for the action."""

    response: Callable[[], Any]


MatchOutcome = Union[NoMatch, Match]


class CallDescriptor(Protocol):
    """An observed call. Only its text is used, for error messages."""

    def __str__(self) -> str: ...


class StepPayload(Protocol):
    """
    SPI interface implemented by matcher/responder pairs.
    The engine treats this as opaque.
    """

    def describe(self, action: Optional[Any] = None) -> str: ...

    def match(self, action: Any) -> Optional[MatchOutcome]:
        """
        Returns None when the action has a different method or shape and the
        step takes no part in this call.
        """
