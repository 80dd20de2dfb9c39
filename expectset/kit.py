"""
Declarative expectation kits.

A kit is a YAML (or already-parsed) document listing expectations:

    expectations:
      - expect: {method: read, args: ["a"], returns: 1, times: 2}
      - whenever: {method: read, args: [{any: true}], returns: 0}
      - in_sequence:
          - expect: {method: open}
          - expect: {method: close}
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

import yaml

from . import predicates
from .cardinality import Cardinality, Priority, any_cardinality, at_least, at_most, between, exactly
from .core import AllOf, Expect, ExpectSet, Loc, Sequence, Step
from .errors import KitError
from .expect import in_any_order, in_sequence, make_expect
from .predicates import Predicate
from .rules import Rule, when

PREDICATES: Dict[str, Callable[[Any], Predicate]] = {
    "any": lambda _: predicates.anything,
    "eq": predicates.eq,
    "neq": predicates.neq,
    "lt": predicates.lt,
    "le": predicates.le,
    "gt": predicates.gt,
    "ge": predicates.ge,
    "contains": predicates.contains,
    "regex": predicates.matches_regex,
}

LEAF_KINDS = {
    "expect": Priority.NORMAL,
    "expect_any": Priority.NORMAL,
    "whenever": Priority.LOW,
}

GROUP_KINDS = {
    "in_sequence": in_sequence,
    "in_any_order": in_any_order,
}


@dataclass(frozen=True)
class Kit:
    expectations: ExpectSet
    source: Optional[str] = None


def load_kit(path: Union[str, Path]) -> Kit:
    try:
        data = yaml.safe_load(Path(path).read_text())
    except OSError as exc:
        raise KitError(f"Kit {path} could not be read: {exc}", {"path": str(path)}) from exc
    except yaml.YAMLError as exc:
        raise KitError(f"Kit {path} is not valid YAML: {exc}", {"path": str(path)}) from exc
    return parse_kit(data, source=str(path))


def parse_kit(data: Any, source: Optional[str] = None) -> Kit:
    if not isinstance(data, Mapping) or "expectations" not in data:
        raise KitError("Kit must be a mapping with an 'expectations' list.", {"path": source})
    entries = data["expectations"]
    if not isinstance(entries, list):
        raise KitError("'expectations' must be a list.", {"path": source})
    counter = itertools.count(1)
    fragments = [
        _parse_entry(entry, f"expectations[{i}]", source, counter)
        for i, entry in enumerate(entries)
    ]
    return Kit(expectations=in_any_order(*fragments), source=source)


def _parse_entry(entry: Any, where: str, source: Optional[str], counter: Iterator[int]) -> ExpectSet:
    if not isinstance(entry, Mapping) or len(entry) != 1:
        raise KitError(f"{where}: each entry must have exactly one key.", {"path": source})
    kind, body = next(iter(entry.items()))

    if kind in GROUP_KINDS:
        if not isinstance(body, list):
            raise KitError(f"{where}.{kind}: expected a list of entries.", {"path": source})
        children = [
            _parse_entry(child, f"{where}.{kind}[{i}]", source, counter)
            for i, child in enumerate(body)
        ]
        return GROUP_KINDS[kind](*children)

    if kind not in LEAF_KINDS:
        raise KitError(f"{where}: unknown entry kind '{kind}'.", {"path": source})
    if not isinstance(body, Mapping):
        raise KitError(f"{where}.{kind}: expected a mapping.", {"path": source})

    rule = _parse_rule(body, f"{where}.{kind}", source)
    if kind == "expect":
        cardinality = _parse_times(body.get("times", 1), f"{where}.{kind}", source)
    else:
        if "times" in body:
            raise KitError(f"{where}.{kind}: 'times' is only allowed on expect.", {"path": source})
        cardinality = any_cardinality
    loc = Loc(source, next(counter)) if source is not None else None
    return make_expect(LEAF_KINDS[kind], cardinality, rule, loc)


def _parse_rule(body: Mapping[str, Any], where: str, source: Optional[str]) -> Rule:
    method = body.get("method")
    if not isinstance(method, str) or not method:
        raise KitError(f"{where}: 'method' must be a non-empty string.", {"path": source})
    args = body.get("args", [])
    kwargs = body.get("kwargs", {})
    if not isinstance(args, list) or not isinstance(kwargs, Mapping):
        raise KitError(f"{where}: 'args' must be a list and 'kwargs' a mapping.", {"path": source})
    matcher = when(
        method,
        *[_parse_predicate(value, where, source) for value in args],
        **{key: _parse_predicate(value, where, source) for key, value in kwargs.items()},
    )
    return matcher.returns(body.get("returns"))


def _parse_predicate(value: Any, where: str, source: Optional[str]) -> Predicate:
    if isinstance(value, Mapping) and len(value) == 1:
        name, operand = next(iter(value.items()))
        if name in PREDICATES:
            try:
                return PREDICATES[name](operand)
            except (TypeError, ValueError, re.error) as exc:
                raise KitError(f"{where}: bad predicate {name}: {exc}", {"path": source}) from exc
    return predicates.eq(value)


def _parse_times(value: Any, where: str, source: Optional[str]) -> Cardinality:
    try:
        if value == "any":
            return any_cardinality
        if isinstance(value, int) and not isinstance(value, bool):
            return exactly(value)
        if isinstance(value, Mapping) and len(value) == 1:
            name, operand = next(iter(value.items()))
            if name == "exactly":
                return exactly(operand)
            if name == "at_least":
                return at_least(operand)
            if name == "at_most":
                return at_most(operand)
            if name == "between":
                low, high = operand
                return between(low, high)
    except (TypeError, ValueError) as exc:
        raise KitError(f"{where}: invalid times {value!r}: {exc}", {"path": source}) from exc
    raise KitError(f"{where}: invalid times {value!r}.", {"path": source})


def kit_steps(kit: Kit) -> List[str]:
    """Descriptions of every leaf in the kit, in tree order."""
    return [step.description for step in _leaves(kit.expectations)]


def _leaves(expected: ExpectSet) -> List[Step]:
    if isinstance(expected, Expect):
        return [expected.step]
    if isinstance(expected, (AllOf, Sequence)):
        return [step for child in expected.children for step in _leaves(child)]
    return []
