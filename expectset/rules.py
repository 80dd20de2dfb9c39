"""
Actions, matchers and rules.

An Action is an observed call. A Matcher describes the calls an expectation
accepts, with one predicate per argument. A Rule pairs a matcher with the
response to produce when it matches, and is the step payload the engine
dispatches on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .predicates import Predicate, as_predicate
from .spi.step_payload import Match, MatchOutcome, NoMatch


def _format_call(method: str, args: Tuple[Any, ...], kwargs: Mapping[str, Any]) -> str:
    parts = [str(arg) for arg in args]
    parts.extend(f"{key}={value}" for key, value in kwargs.items())
    return f"{method}({', '.join(parts)})"


@dataclass(frozen=True)
class Action:
    method: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return _format_call(
            self.method,
            tuple(repr(arg) for arg in self.args),
            {key: repr(value) for key, value in self.kwargs.items()},
        )


@dataclass(frozen=True)
class Matcher:
    method: str
    args: Tuple[Predicate, ...] = ()
    kwargs: Dict[str, Predicate] = field(default_factory=dict)

    def describe(self, action: Optional[Action] = None) -> str:
        return _format_call(self.method, self.args, self.kwargs)

    def match(self, action: Action) -> Optional[int]:
        """
        Returns None if the action calls another method or has another shape,
        otherwise the number of arguments rejected by their predicates.
        """
        if action.method != self.method:
            return None
        if len(action.args) != len(self.args):
            return None
        if set(action.kwargs) != set(self.kwargs):
            return None
        distance = sum(
            1 for predicate, value in zip(self.args, action.args) if not predicate(value)
        )
        distance += sum(
            1 for key, predicate in self.kwargs.items() if not predicate(action.kwargs[key])
        )
        return distance

    def returns(self, value: Any) -> "Rule":
        """Respond with a constant value."""
        return Rule(self, lambda _action: value)

    def responds(self, response: Callable[[Action], Any]) -> "Rule":
        """Respond by calling ``response`` with the matched action."""
        return Rule(self, response)


def when(method: str, *args: Any, **kwargs: Any) -> Matcher:
    return Matcher(
        method,
        tuple(as_predicate(arg) for arg in args),
        {key: as_predicate(value) for key, value in kwargs.items()},
    )


@dataclass(frozen=True)
class Rule:
    matcher: Matcher
    response: Callable[[Action], Any]

    def describe(self, action: Optional[Action] = None) -> str:
        return self.matcher.describe(action)

    def match(self, action: Action) -> Optional[MatchOutcome]:
        distance = self.matcher.match(action)
        if distance is None:
            return None
        if distance > 0:
            return NoMatch(distance)
        return Match(lambda: self.response(action))
