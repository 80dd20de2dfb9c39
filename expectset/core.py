"""
expectset core.

The expectation tree and the algorithms over it: live-step enumeration,
simplification, excess reduction, registration and teardown reporting.
Steps are opaque; all semantics of matching live in their payloads.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional, Tuple

from .cardinality import Cardinality, Priority, once
from .errors import UnmetExpectationsError

_step_counter = itertools.count()


@dataclass(frozen=True, order=True)
class Loc:
    """Where an expectation was declared."""
    filename: str
    lineno: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.lineno}"


@dataclass(frozen=True, eq=False)
class Step:
    """
    A single step of an expectation.

    Steps are created once at registration and never mutated. They compare
    by identity; ``seq`` records registration order.
    """
    loc: Optional[Loc]
    description: str
    payload: Any
    seq: int = field(default_factory=lambda: next(_step_counter))


class ExpectSet:
    """Base class of the four expectation tree shapes."""


@dataclass(frozen=True)
class ExpectNothing(ExpectSet):
    pass


@dataclass(frozen=True)
class Expect(ExpectSet):
    priority: Priority
    cardinality: Cardinality
    step: Step


@dataclass(frozen=True)
class AllOf(ExpectSet):
    """Children are live simultaneously and may be satisfied in any order."""
    children: Tuple[ExpectSet, ...]


@dataclass(frozen=True)
class Sequence(ExpectSet):
    """Children must be satisfied left to right."""
    children: Tuple[ExpectSet, ...]


EXPECT_NOTHING = ExpectNothing()


class LiveStep(NamedTuple):
    priority: Priority
    step: Step
    residual: ExpectSet


def register(priority: Priority, cardinality: Cardinality, step: Step) -> Expect:
    return Expect(priority, cardinality, step)


def combine(existing: ExpectSet, new: ExpectSet) -> ExpectSet:
    """Merge a newly registered fragment into the running tree."""
    return simplify(AllOf((existing, new)))


def live_steps(expected: ExpectSet) -> List[LiveStep]:
    """
    Get every step that can match an action right now, together with the
    remaining expectations if that step were to match.

    Exactly one child of a group advances per call. In a Sequence, a child is
    only offered once every child before it has no excess; skipped children
    are dropped from the residual.
    """
    return [
        LiveStep(priority, step, simplify(residual))
        for priority, step, residual in _live(expected)
    ]


def _live(expected: ExpectSet) -> List[Tuple[Priority, Step, ExpectSet]]:
    if isinstance(expected, Expect):
        if expected.cardinality.is_never:
            return []
        card = expected.cardinality.decrement()
        if card is None:
            residual: ExpectSet = EXPECT_NOTHING
        else:
            residual = Expect(expected.priority, card, expected.step)
        return [(expected.priority, expected.step, residual)]

    result: List[Tuple[Priority, Step, ExpectSet]] = []
    if isinstance(expected, AllOf):
        children = expected.children
        for i, child in enumerate(children):
            for priority, step, rest in _live(child):
                others = children[:i] + (rest,) + children[i + 1:]
                result.append((priority, step, AllOf(others)))
    elif isinstance(expected, Sequence):
        children = expected.children
        for i, child in enumerate(children):
            for priority, step, rest in _live(child):
                result.append((priority, step, Sequence((rest,) + children[i + 1:])))
            if not isinstance(excess(child), ExpectNothing):
                break
    return result


def simplify(expected: ExpectSet) -> ExpectSet:
    """
    Remove ExpectNothing children and collapse nested groups with the same
    ordering constraint. Empty groups become ExpectNothing and singleton
    groups become their only child.
    """
    if isinstance(expected, AllOf):
        return _simplify_group(AllOf, expected.children)
    if isinstance(expected, Sequence):
        return _simplify_group(Sequence, expected.children)
    return expected


def _simplify_group(kind: type, children: Tuple[ExpectSet, ...]) -> ExpectSet:
    flat: List[ExpectSet] = []
    for child in children:
        child = simplify(child)
        if isinstance(child, ExpectNothing):
            continue
        if isinstance(child, kind):
            flat.extend(child.children)
        else:
            flat.append(child)
    if not flat:
        return EXPECT_NOTHING
    if len(flat) == 1:
        return flat[0]
    return kind(tuple(flat))


def excess(expected: ExpectSet) -> ExpectSet:
    """
    Reduce a set of expectations to the steps that are still mandatory,
    i.e. could not be satisfied by zero further actions.
    """
    return simplify(_excess(expected))


def _excess(expected: ExpectSet) -> ExpectSet:
    if isinstance(expected, Expect):
        if expected.cardinality.minimum == 0:
            return EXPECT_NOTHING
        return expected
    if isinstance(expected, AllOf):
        return AllOf(tuple(_excess(child) for child in expected.children))
    if isinstance(expected, Sequence):
        return Sequence(tuple(_excess(child) for child in expected.children))
    return EXPECT_NOTHING


def show_with_loc(loc: Optional[Loc], text: str) -> str:
    if loc is None:
        return text
    return f"{text} at {loc}"


def format_expect_set(expected: ExpectSet, prefix: str = "", indent: str = "  ") -> str:
    """Render a set of expectations as indented text, one node per line."""
    if isinstance(expected, Expect):
        modifiers = []
        if expected.priority == Priority.LOW:
            modifiers.append("low priority")
        if expected.cardinality != once:
            modifiers.append(str(expected.cardinality))
        text = show_with_loc(expected.step.loc, prefix + expected.step.description)
        if modifiers:
            text += " (" + ", ".join(modifiers) + ")"
        return text
    if isinstance(expected, AllOf):
        header = "all of (in any order):"
    elif isinstance(expected, Sequence):
        header = "in sequence:"
    else:
        return prefix + "nothing"
    lines = [prefix + header]
    lines.extend(
        format_expect_set(child, prefix + indent, indent) for child in expected.children
    )
    return "\n".join(lines)


def finish(expected: ExpectSet, indent: str = "  ") -> None:
    """
    Teardown check.

    Raises UnmetExpectationsError carrying the rendered residual when any
    mandatory expectation is left.
    """
    missing = excess(expected)
    if isinstance(missing, ExpectNothing):
        return
    raise UnmetExpectationsError(format_expect_set(missing, indent, indent))
