"""
Call dispatch.

Matches one observed action against the live steps of an expectation tree,
applies the priority rule and returns the single committed response with the
residual tree. Nothing is mutated here; callers commit the residual.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .cardinality import Priority
from .core import ExpectSet, Loc, live_steps, show_with_loc
from .errors import AmbiguousMatchError, NoMatchError, PartialMatchError
from .spi.step_payload import Match, NoMatch

logger = logging.getLogger(__name__)

DEFAULT_MAX_CLOSEST = 5


@dataclass(frozen=True)
class PartialCandidate:
    distance: int
    seq: int
    loc: Optional[Loc]
    description: str


@dataclass(frozen=True)
class FullCandidate:
    priority: Priority
    loc: Optional[Loc]
    description: str
    residual: ExpectSet
    response: Callable[[], Any]


def try_match(
    expected: ExpectSet,
    action: Any,
) -> Tuple[List[PartialCandidate], List[FullCandidate]]:
    """Partition the live steps of ``expected`` by how they match ``action``."""
    partials: List[PartialCandidate] = []
    fulls: List[FullCandidate] = []
    for priority, step, residual in live_steps(expected):
        outcome = step.payload.match(action)
        if outcome is None:
            continue
        description = step.payload.describe(action)
        if isinstance(outcome, NoMatch):
            partials.append(
                PartialCandidate(outcome.distance, step.seq, step.loc, description)
            )
        elif isinstance(outcome, Match):
            fulls.append(
                FullCandidate(priority, step.loc, description, residual, outcome.response)
            )
        else:
            raise TypeError(f"Unexpected match outcome {outcome!r} from {step.description}")
    return partials, fulls


def top_priority(fulls: List[FullCandidate]) -> List[FullCandidate]:
    """Keep only the full matches at the highest priority present."""
    if not fulls:
        return []
    best = max(candidate.priority for candidate in fulls)
    return [candidate for candidate in fulls if candidate.priority == best]


def select(
    expected: ExpectSet,
    action: Any,
    max_closest: int = DEFAULT_MAX_CLOSEST,
) -> FullCandidate:
    """
    Decide which single expectation satisfies ``action``.

    Raises:
        NoMatchError, PartialMatchError, AmbiguousMatchError
    """
    partials, fulls = try_match(expected, action)
    winners = top_priority(fulls)
    logger.debug(
        "dispatch %s: %d partial, %d full, %d at top priority",
        action, len(partials), len(fulls), len(winners),
    )

    if not winners:
        if not partials:
            raise NoMatchError(str(action))
        ranked = sorted(partials, key=lambda c: (c.distance, c.seq))
        raise PartialMatchError(
            str(action),
            [show_with_loc(c.loc, c.description) for c in ranked[:max_closest]],
        )
    if len(winners) > 1:
        raise AmbiguousMatchError(
            str(action),
            [show_with_loc(c.loc, c.description) for c in winners],
        )

    chosen = winners[0]
    logger.debug("dispatch %s: matched %s", action, chosen.description)
    return chosen


def dispatch(
    expected: ExpectSet,
    action: Any,
    max_closest: int = DEFAULT_MAX_CLOSEST,
) -> Tuple[Callable[[], Any], ExpectSet]:
    """
    Match ``action`` against ``expected``.

    Args:
        expected: Current expectation tree
        action: Observed call; only its str() is used outside of payloads
        max_closest: Number of partial matches reported on failure

    Returns:
        The committed response (run it after committing the residual) and
        the residual expectation tree
    """
    chosen = select(expected, action, max_closest)
    return chosen.response, chosen.residual
