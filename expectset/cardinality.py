"""
Cardinality and priority primitives.

A cardinality counts the remaining permitted occurrences of one expectation.
A priority ranks expectations so that catch-all defaults never override a
specific expectation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Priority(IntEnum):
    """Rank of an expectation. Higher wins; equal ranks are never resolved."""
    LOW = 0
    NORMAL = 1


@dataclass(frozen=True)
class Cardinality:
    """
    Interval of remaining permitted occurrences.

    ``maximum`` is None for an unbounded interval.
    """
    minimum: int
    maximum: Optional[int] = None

    def __post_init__(self) -> None:
        for bound in (self.minimum, self.maximum):
            if bound is not None and (isinstance(bound, bool) or not isinstance(bound, int)):
                raise ValueError(f"Cardinality bounds must be integers, got {bound!r}")
        if self.minimum < 0:
            raise ValueError(f"Cardinality minimum must be >= 0, got {self.minimum}")
        if self.maximum is not None and self.maximum < self.minimum:
            raise ValueError(
                f"Cardinality maximum {self.maximum} is below minimum {self.minimum}"
            )

    @property
    def is_never(self) -> bool:
        return self.maximum == 0

    def decrement(self) -> Optional["Cardinality"]:
        """
        Consume one occurrence.

        Returns None when no further occurrence would be permitted, i.e. the
        expectation is exhausted and must leave the tree.
        """
        if self.maximum is not None and self.maximum <= 1:
            return None
        if self.minimum == 0 and self.maximum is None:
            return self
        maximum = None if self.maximum is None else self.maximum - 1
        return Cardinality(max(0, self.minimum - 1), maximum)

    def __str__(self) -> str:
        lo, hi = self.minimum, self.maximum
        if hi is None:
            if lo == 0:
                return "any number of times"
            if lo == 1:
                return "at least once"
            return f"at least {lo} times"
        if hi == 0:
            return "never"
        if lo == 0:
            return "at most once" if hi == 1 else f"at most {hi} times"
        if lo == hi:
            return "once" if lo == 1 else f"{lo} times"
        if hi == lo + 1:
            return f"{lo} or {hi} times"
        return f"{lo} to {hi} times"


once = Cardinality(1, 1)
any_cardinality = Cardinality(0, None)


def exactly(n: int) -> Cardinality:
    return Cardinality(n, n)


def at_least(n: int) -> Cardinality:
    return Cardinality(n, None)


def at_most(n: int) -> Cardinality:
    return Cardinality(0, n)


def between(m: int, n: int) -> Cardinality:
    return Cardinality(m, n)
