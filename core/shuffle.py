"""
core/shuffle.py
Fisher–Yates shuffle over an injected random source.
"""

from __future__ import annotations

import random
from typing import MutableSequence, Optional, TypeVar

T = TypeVar("T")


class Shuffler:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Reorder *items* in place and return it."""
        for i in range(len(items) - 1, 0, -1):
            j = self._rng.randint(0, i)
            items[i], items[j] = items[j], items[i]
        return items
