"""
Argument predicates for matchers.

A predicate is a described boolean test on one argument value. Plain values
used where a predicate is expected are wrapped in ``eq``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class Predicate:
    description: str
    accept: Callable[[Any], bool]

    def __call__(self, value: Any) -> bool:
        return bool(self.accept(value))

    def __str__(self) -> str:
        return self.description


def as_predicate(value: Any) -> Predicate:
    if isinstance(value, Predicate):
        return value
    return eq(value)


def _guarded(test: Callable[[Any], bool]) -> Callable[[Any], bool]:
    def accept(value: Any) -> bool:
        try:
            return test(value)
        except TypeError:
            # incomparable types never match
            return False
    return accept


anything = Predicate("anything", lambda _: True)


def eq(expected: Any) -> Predicate:
    return Predicate(repr(expected), lambda value: value == expected)


def neq(expected: Any) -> Predicate:
    return Predicate(f"!= {expected!r}", lambda value: value != expected)


def lt(bound: Any) -> Predicate:
    return Predicate(f"< {bound!r}", _guarded(lambda value: value < bound))


def le(bound: Any) -> Predicate:
    return Predicate(f"<= {bound!r}", _guarded(lambda value: value <= bound))


def gt(bound: Any) -> Predicate:
    return Predicate(f"> {bound!r}", _guarded(lambda value: value > bound))


def ge(bound: Any) -> Predicate:
    return Predicate(f">= {bound!r}", _guarded(lambda value: value >= bound))


def is_instance(cls: type) -> Predicate:
    return Predicate(f"instance of {cls.__name__}", lambda value: isinstance(value, cls))


def contains(item: Any) -> Predicate:
    return Predicate(f"contains {item!r}", _guarded(lambda value: item in value))


def matches_regex(pattern: str) -> Predicate:
    compiled = re.compile(pattern)
    return Predicate(
        f"matching /{pattern}/",
        lambda value: isinstance(value, str) and compiled.search(value) is not None,
    )


def satisfies(fn: Callable[[Any], bool], description: str = "satisfying predicate") -> Predicate:
    return Predicate(description, fn)
