"""Tests for core.shuffle.Shuffler."""

import random
from collections import Counter

import pytest

from core.shuffle import Shuffler


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("items", [[], [1], [1, 2], list("abcdefgh"), [3, 3, 1, 1, 2]])
def test_result_is_a_permutation(seed, items):
    shuffled = Shuffler(random.Random(seed)).shuffle(list(items))
    assert Counter(shuffled) == Counter(items)


def test_shuffles_in_place():
    items = list(range(10))
    result = Shuffler(random.Random(0)).shuffle(items)
    assert result is items


def test_same_seed_same_order():
    a = Shuffler(random.Random(42)).shuffle(list(range(20)))
    b = Shuffler(random.Random(42)).shuffle(list(range(20)))
    assert a == b


def test_every_permutation_of_three_is_reachable():
    shuffler = Shuffler(random.Random(7))
    seen = {tuple(shuffler.shuffle([1, 2, 3])) for _ in range(600)}
    assert len(seen) == 6
