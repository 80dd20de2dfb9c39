import random
from collections import Counter

import pytest

from expectset.cardinality import Cardinality, Priority
from expectset.core import (
    EXPECT_NOTHING,
    AllOf,
    ExpectNothing,
    Sequence,
    excess,
    live_steps,
    simplify,
)
from expectset.dispatch import dispatch
from expectset.errors import MockError
from expectset.expect import make_expect
from expectset.rules import Action, when

CARDINALITIES = [
    Cardinality(1, 1),
    Cardinality(0, None),
    Cardinality(1, None),
    Cardinality(2, 3),
    Cardinality(0, 2),
]


def _random_tree(rng: random.Random, depth: int = 0):
    roll = rng.random()
    if depth >= 3 or roll < 0.4:
        if rng.random() < 0.1:
            return EXPECT_NOTHING
        method = rng.choice(["a", "b", "c"])
        priority = rng.choice([Priority.NORMAL, Priority.LOW])
        return make_expect(priority, rng.choice(CARDINALITIES), when(method).returns(method))
    kind = AllOf if roll < 0.7 else Sequence
    return kind(tuple(_random_tree(rng, depth + 1) for _ in range(rng.randint(0, 3))))


def _live_multiset(tree):
    return Counter((priority, step.seq) for priority, step, _ in live_steps(tree))


SEEDS = range(60)


@pytest.mark.parametrize("seed", SEEDS)
def test_simplify_idempotent(seed):
    tree = _random_tree(random.Random(seed))
    assert simplify(simplify(tree)) == simplify(tree)


@pytest.mark.parametrize("seed", SEEDS)
def test_simplify_preserves_live_steps(seed):
    tree = _random_tree(random.Random(seed))
    assert _live_multiset(tree) == _live_multiset(simplify(tree))


@pytest.mark.parametrize("seed", SEEDS)
def test_excess_idempotent(seed):
    tree = _random_tree(random.Random(seed))
    assert excess(excess(tree)) == excess(tree)


@pytest.mark.parametrize("seed", SEEDS)
def test_excess_commutes_with_simplify(seed):
    tree = _random_tree(random.Random(seed))
    assert excess(simplify(tree)) == excess(tree)


@pytest.mark.parametrize("seed", SEEDS)
def test_random_call_sequences_keep_tree_normalized(seed):
    rng = random.Random(seed)
    tree = simplify(_random_tree(rng))
    for _ in range(8):
        action = Action(rng.choice(["a", "b", "c"]))
        before = tree
        try:
            response, tree = dispatch(tree, action)
        except MockError:
            assert tree is before
            continue
        assert response() == action.method
        assert simplify(tree) == tree


def test_nothing_is_its_own_excess():
    assert isinstance(excess(EXPECT_NOTHING), ExpectNothing)
