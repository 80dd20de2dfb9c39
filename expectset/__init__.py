"""
expectset - runtime verification of call expectations for mocks.

Tests declare expected interactions (matcher, response, cardinality,
priority, ordering). Every observed call is matched against the expectations
that are live right now; exactly one must be satisfied, and at teardown no
mandatory expectation may be left.

Design principles:
- Ambiguity is always an error, never silently resolved
- Low-priority defaults never override a normal expectation
- A failed call leaves the expectation tree untouched
"""

from .cardinality import (
    Cardinality,
    Priority,
    any_cardinality,
    at_least,
    at_most,
    between,
    exactly,
    once,
)
from .config import EngineConfig, load_config
from .core import (
    AllOf,
    EXPECT_NOTHING,
    Expect,
    ExpectNothing,
    ExpectSet,
    Loc,
    Sequence,
    Step,
    combine,
    excess,
    finish,
    format_expect_set,
    live_steps,
    register,
    simplify,
)
from .dispatch import dispatch
from .errors import (
    AmbiguousMatchError,
    KitError,
    MockError,
    NoMatchError,
    PartialMatchError,
    SessionNotFoundError,
    UnmetExpectationsError,
)
from .expect import expect, expect_any, expect_n, in_any_order, in_sequence, whenever
from .kit import Kit, load_kit, parse_kit
from .rules import Action, Matcher, Rule, when
from .session import Mock, MockSession, run_mock

__all__ = [
    "Cardinality",
    "Priority",
    "any_cardinality",
    "at_least",
    "at_most",
    "between",
    "exactly",
    "once",
    "AllOf",
    "EXPECT_NOTHING",
    "Expect",
    "ExpectNothing",
    "ExpectSet",
    "Loc",
    "Sequence",
    "Step",
    "combine",
    "excess",
    "finish",
    "format_expect_set",
    "live_steps",
    "register",
    "simplify",
    "dispatch",
    "EngineConfig",
    "load_config",
    "Kit",
    "load_kit",
    "parse_kit",
    "AmbiguousMatchError",
    "KitError",
    "MockError",
    "NoMatchError",
    "PartialMatchError",
    "SessionNotFoundError",
    "UnmetExpectationsError",
    "expect",
    "expect_any",
    "expect_n",
    "in_any_order",
    "in_sequence",
    "whenever",
    "Action",
    "Matcher",
    "Rule",
    "when",
    "Mock",
    "MockSession",
    "run_mock",
]
