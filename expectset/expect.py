"""
Registration helpers.

Each helper turns a Rule into an expectation fragment, capturing the
location of its caller for reports. Fragments are combined into a session
with ``MockSession.register``.
"""

from __future__ import annotations

import inspect
import os
from typing import Optional, Union

from .cardinality import Cardinality, Priority, any_cardinality, exactly, once
from .core import AllOf, ExpectSet, Loc, Sequence, Step, register, simplify
from .rules import Rule


def caller_loc(depth: int = 2) -> Optional[Loc]:
    """Location of the frame ``depth`` levels above this one."""
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                return None
            frame = frame.f_back
        if frame is None:
            return None
        return Loc(os.path.basename(frame.f_code.co_filename), frame.f_lineno)
    finally:
        del frame


def make_expect(
    priority: Priority,
    cardinality: Cardinality,
    rule: Rule,
    loc: Optional[Loc] = None,
) -> ExpectSet:
    step = Step(loc=loc, description=rule.describe(), payload=rule)
    return register(priority, cardinality, step)


def expect(rule: Rule) -> ExpectSet:
    """Expect an action exactly once."""
    return make_expect(Priority.NORMAL, once, rule, caller_loc())


def expect_n(cardinality: Union[Cardinality, int], rule: Rule) -> ExpectSet:
    """Expect an action some number of times. An int means exactly that many."""
    if isinstance(cardinality, int):
        cardinality = exactly(cardinality)
    return make_expect(Priority.NORMAL, cardinality, rule, caller_loc())


def expect_any(rule: Rule) -> ExpectSet:
    """Allow an action any number of times."""
    return make_expect(Priority.NORMAL, any_cardinality, rule, caller_loc())


def whenever(rule: Rule) -> ExpectSet:
    """
    Default response for an action. Unlike ``expect_any``, any other matching
    expectation always overrides it.
    """
    return make_expect(Priority.LOW, any_cardinality, rule, caller_loc())


def in_sequence(*fragments: ExpectSet) -> ExpectSet:
    """
    Expect fragments in this order. Other actions may still happen in
    between; only these fragments are ordered relative to each other.
    """
    return simplify(Sequence(tuple(fragments)))


def in_any_order(*fragments: ExpectSet) -> ExpectSet:
    return simplify(AllOf(tuple(fragments)))
