from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Seedable random collaborator used for shapes, letters and quiz decoys."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def choice(self, items: Sequence[T]) -> T:
        return items[self.rng.randrange(len(items))]

    def range_int(self, min_inclusive: int, max_exclusive: int) -> int:
        return self.rng.randrange(min_inclusive, max_exclusive)

    def weighted_choice(self, items: Sequence[T], weights: Sequence[int]) -> T:
        if len(items) != len(weights):
            raise ValueError("items and weights length mismatch")
        total = sum(weights)
        pick = self.rng.randrange(total)
        acc = 0
        for item, weight in zip(items, weights):
            acc += weight
            if pick < acc:
                return item
        return items[-1]

    def shuffle(self, items: list) -> None:
        # Fisher-Yates over range_int so that a scripted source drives it too
        for i in range(len(items) - 1, 0, -1):
            j = self.range_int(0, i + 1)
            items[i], items[j] = items[j], items[i]
